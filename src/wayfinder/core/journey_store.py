"""Persistence and review workflow for discovered journeys."""

import json
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from .models import Journey, JourneyStatus
from ..utils import log, config, normalize_url


class JourneyStore:
    """Stores journeys in a single JSON file and tracks their review status."""

    def __init__(self, path: Optional[Path] = None):
        """
        Initialize the journey store.

        Args:
            path: JSON file holding all journeys (defaults to the data dir)
        """
        self.path = Path(path) if path else config.journeys_file
        self._journeys: Dict[str, Journey] = self._load()

    def _load(self) -> Dict[str, Journey]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            log.error(f"Failed to load journeys from {self.path}: {e}")
            return {}

        journeys = {}
        for record in data.get("journeys", []):
            try:
                journey = Journey.from_dict(record)
                journeys[journey.id] = journey
            except (KeyError, TypeError) as e:
                log.warning(f"Skipping malformed journey record: {e}")
        return journeys

    def _save(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "updated_at": datetime.now().isoformat(),
            "journeys": [journey.to_dict() for journey in self._journeys.values()]
        }
        with open(self.path, 'w') as f:
            json.dump(data, f, indent=2)

    def add(self, journey: Journey) -> bool:
        """
        Store a journey.

        Returns:
            False if a journey with the same id is already stored
        """
        if journey.id in self._journeys:
            log.debug(f"Journey {journey.id} already stored")
            return False
        self._journeys[journey.id] = journey
        self._save()
        return True

    def get(self, journey_id: str) -> Optional[Journey]:
        return self._journeys.get(journey_id)

    def list(self, status: Optional[JourneyStatus] = None) -> List[Journey]:
        """Journeys in insertion order, optionally filtered by status."""
        journeys = list(self._journeys.values())
        if status:
            journeys = [j for j in journeys if j.status == status]
        return journeys

    def _set_status(self, journey_id: str, status: JourneyStatus) -> Optional[Journey]:
        journey = self._journeys.get(journey_id)
        if not journey:
            log.warning(f"Unknown journey: {journey_id}")
            return None
        journey.status = status
        self._save()
        log.info(f"Journey '{journey.name}' marked {status}")
        return journey

    def confirm(self, journey_id: str) -> Optional[Journey]:
        return self._set_status(journey_id, "confirmed")

    def discard(self, journey_id: str) -> Optional[Journey]:
        return self._set_status(journey_id, "discarded")

    def delete(self, journey_id: str) -> bool:
        if self._journeys.pop(journey_id, None) is None:
            return False
        self._save()
        return True

    def clear(self):
        self._journeys = {}
        self._save()

    def has_similar(self, journey: Journey) -> bool:
        """
        True when a stored journey (other than this one) clicks the same
        selectors in the same order and ends on the same normalized URL.
        """
        end_url = normalize_url(journey.end_url)
        for existing in self._journeys.values():
            if existing.id == journey.id:
                continue
            if existing.selectors == journey.selectors and normalize_url(existing.end_url) == end_url:
                return True
        return False

    def export_markdown(self, journey_id: str, output_path: Optional[Path] = None) -> Path:
        """
        Write a readable Markdown summary of a journey.

        Args:
            journey_id: Journey to export
            output_path: Target file (defaults to the exports dir)

        Returns:
            Path to the written file
        """
        journey = self._journeys.get(journey_id)
        if not journey:
            raise KeyError(f"Unknown journey: {journey_id}")

        output_path = Path(output_path) if output_path else config.exports_dir / f"{journey.id}.md"
        output_path.parent.mkdir(parents=True, exist_ok=True)

        content = f"""# {journey.name}

## Journey Information

- **ID**: {journey.id}
- **Status**: {journey.status}
- **Confidence**: {journey.confidence}
- **Created**: {journey.created_at}
- **Start URL**: {journey.start_url}
- **End URL**: {journey.end_url}
- **Completion**: {journey.completion_reason}

## Steps

"""

        for step in journey.steps:
            ref = step.element_ref
            content += f"""### Step {step.order}: {step.description}

- **Action**: {step.type}
- **Selector**: `{ref.get('selector', '')}`
- **Element**: {ref.get('type', '')} {ref.get('text') or ''}

"""

        with open(output_path, 'w') as f:
            f.write(content)

        log.info(f"Exported journey to: {output_path}")
        return output_path
