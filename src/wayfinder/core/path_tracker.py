"""Loop prevention for the backtracking walk."""

from typing import List, Set, Tuple

from ..utils import log, normalize_url

Hop = Tuple[str, str]


class PathTracker:
    """
    Tracks the signature of the current path and every signature explored.

    A signature is the ordered list of (url clicked on, selector) hops from
    the root. A branch is rejected when its newest hop already appears earlier
    in the path, or when the full signature was explored before this session.
    """

    def __init__(self):
        self.hops: List[Hop] = []
        self.explored: Set[str] = set()

    @staticmethod
    def hash_hops(hops: List[Hop]) -> str:
        return " → ".join(f"{url}::{selector}" for url, selector in hops)

    def signature(self) -> str:
        """Hashed signature of the current path."""
        return self.hash_hops(self.hops)

    def should_skip(self, url: str, selector: str) -> bool:
        """
        Decide whether clicking selector on url would revisit known ground.

        Args:
            url: URL of the page the click happens on
            selector: Selector being clicked

        Returns:
            True if the branch is a cycle or was already explored
        """
        hop = (normalize_url(url), selector)
        if hop in self.hops:
            log.warning(f"Cycle detected: {selector} on {hop[0]} already on the current path")
            return True

        candidate = self.hash_hops(self.hops + [hop])
        if candidate in self.explored:
            log.warning(f"Path already explored this session: {candidate}")
            return True

        return False

    def push(self, url: str, selector: str) -> str:
        """Extend the path with a hop and remember its signature."""
        self.hops.append((normalize_url(url), selector))
        signature = self.signature()
        self.explored.add(signature)
        return signature

    def pop(self):
        if self.hops:
            self.hops.pop()

    def reset(self):
        """Forget the current path. Explored signatures are kept."""
        self.hops = []
