"""Durable namespaced storage for the page cache."""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Any

from ..utils import log


class Storage(ABC):
    """A flat map of namespace -> JSON-compatible document."""

    @abstractmethod
    def load(self, namespace: str) -> Dict[str, Any]:
        """Return the stored document, or an empty dict when none exists."""

    @abstractmethod
    def save(self, namespace: str, data: Dict[str, Any]):
        """Replace the stored document."""

    @abstractmethod
    def remove(self, namespace: str):
        """Forget the namespace entirely."""


class MemoryStorage(Storage):
    """Process-local storage, used by tests and throwaway sessions."""

    def __init__(self):
        self._documents: Dict[str, str] = {}

    def load(self, namespace: str) -> Dict[str, Any]:
        raw = self._documents.get(namespace)
        return json.loads(raw) if raw else {}

    def save(self, namespace: str, data: Dict[str, Any]):
        # Serialize so callers never share mutable state with the store
        self._documents[namespace] = json.dumps(data)

    def remove(self, namespace: str):
        self._documents.pop(namespace, None)


class JsonFileStorage(Storage):
    """Stores each namespace as `<directory>/<namespace>.json`."""

    def __init__(self, directory: Path):
        """
        Initialize file storage.

        Args:
            directory: Folder holding one JSON file per namespace
        """
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, namespace: str) -> Path:
        return self.directory / f"{namespace}.json"

    def load(self, namespace: str) -> Dict[str, Any]:
        path = self._path(namespace)
        if not path.exists():
            return {}

        try:
            with open(path, 'r') as f:
                content = f.read()
        except OSError as e:
            log.warning(f"Could not read {path}: {e}")
            return {}

        if not content.strip():
            return {}

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            log.warning(f"Ignoring corrupt store {path}: {e}")
            return {}

        if not isinstance(data, dict):
            log.warning(f"Ignoring store {path}: expected an object")
            return {}
        return data

    def save(self, namespace: str, data: Dict[str, Any]):
        path = self._path(namespace)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{namespace}.", suffix=".tmp")
        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def remove(self, namespace: str):
        path = self._path(namespace)
        if path.exists():
            path.unlink()
