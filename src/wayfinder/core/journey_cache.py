"""Keyed cache of analyzed pages, persisted on every mutation."""

from typing import Dict, Any, List, Optional

from .models import PageNode
from .storage import Storage, MemoryStorage
from ..utils import log, normalize_url

NAMESPACE = "wayfinder-ai-journeys-storage"


class JourneyCache:
    """
    The single writer of PageNode records.

    A page reached through the same entry action maps to the same key, so it is
    extracted and classified at most once per session. Nodes reference each
    other by key; the whole map is written back to storage after each change.
    """

    def __init__(self, storage: Optional[Storage] = None, namespace: str = NAMESPACE):
        """
        Initialize the cache and load any persisted nodes.

        Args:
            storage: Durable backend (defaults to in-memory)
            namespace: Storage namespace holding the node map
        """
        self.storage = storage or MemoryStorage()
        self.namespace = namespace
        self._nodes: Dict[str, PageNode] = self._load()

    @staticmethod
    def generate_key(url: str, entry_action_label: Optional[str] = None) -> str:
        """
        Derive the cache key for a page.

        The query string and a single trailing slash are dropped from the URL.
        Without an entry label the suffix is `default`; otherwise the label is
        lower-cased with all whitespace removed.

        Args:
            url: Page URL
            entry_action_label: Label of the element clicked to reach the page

        Returns:
            Stable key string
        """
        clean_url = normalize_url(url)
        if not entry_action_label:
            return f"{clean_url}_default"
        suffix = "".join(entry_action_label.lower().split())
        return f"{clean_url}_{suffix}"

    def _load(self) -> Dict[str, PageNode]:
        data = self.storage.load(self.namespace)
        nodes: Dict[str, PageNode] = {}
        for key, record in data.items():
            try:
                nodes[key] = PageNode.from_dict(record)
            except (KeyError, TypeError, AttributeError) as e:
                log.warning(f"Dropping malformed cache entry {key!r}: {e}")
        if nodes:
            log.info(f"Loaded {len(nodes)} cached pages from {self.namespace}")
        return nodes

    def _persist(self):
        self.storage.save(self.namespace, self.snapshot())

    def get(self, key: str) -> Optional[PageNode]:
        return self._nodes.get(key)

    def has(self, key: str) -> bool:
        return key in self._nodes

    def put(self, key: str, node: PageNode):
        """
        Insert or overwrite a node.

        Overwriting never clears a visited flag: any selector already visited in
        the previous record stays visited in the new one.
        """
        previous = self._nodes.get(key)
        if previous is not None:
            visited = {el.selector for el in previous.meaningful_elements if el.visited}
            for element in node.meaningful_elements:
                if element.selector in visited:
                    element.mark_visited()
            for child_key in previous.child_keys:
                if child_key not in node.child_keys:
                    node.child_keys.append(child_key)
        self._nodes[key] = node
        self._persist()

    def mark_visited(self, key: str, selector: str):
        """Flag an element as explored. No-op when node or element is absent."""
        node = self._nodes.get(key)
        if not node:
            return
        element = node.find_element(selector)
        if not element:
            return
        element.mark_visited()
        self._persist()

    def link_child(self, parent_key: str, child_key: str):
        """Record that child_key was reached from parent_key. Idempotent."""
        parent = self._nodes.get(parent_key)
        if not parent:
            log.warning(f"Cannot link {child_key}: parent {parent_key} is not cached")
            return
        if child_key in parent.child_keys:
            return
        parent.child_keys.append(child_key)
        self._persist()

    def clear(self):
        self._nodes = {}
        self._persist()

    def nodes(self) -> List[PageNode]:
        """All cached nodes in insertion order."""
        return list(self._nodes.values())

    def snapshot(self) -> Dict[str, Any]:
        """Plain-dict export of the whole node map."""
        return {key: node.to_dict() for key, node in self._nodes.items()}

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def __len__(self) -> int:
        return len(self._nodes)
