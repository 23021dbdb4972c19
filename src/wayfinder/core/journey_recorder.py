"""Turns a completed traversal path into a persistable Journey."""

import uuid
from typing import Dict, Any, List

from .models import Decision, Journey, JourneyStep, PathEntry
from ..utils import log


class JourneyRecorder:
    """Creates Journeys. Never touches cached pages or their elements."""

    def __init__(self, auto_save: bool = False):
        """
        Args:
            auto_save: Record journeys as confirmed instead of pending
        """
        self.auto_save = auto_save

    @staticmethod
    def walk(leaf: PathEntry) -> List[PathEntry]:
        """Entries from root to leaf, following parent links from the leaf."""
        entries: List[PathEntry] = []
        current = leaf
        while current is not None:
            entries.append(current)
            current = current.parent
        entries.reverse()
        return entries

    @classmethod
    def serialize_path(cls, leaf: PathEntry) -> List[Dict[str, Any]]:
        """Plain records for the path, without back-references."""
        return [entry.to_record() for entry in cls.walk(leaf)]

    @staticmethod
    def to_steps(entries: List[PathEntry]) -> List[JourneyStep]:
        """One click step per entry that was reached through an element. Root is skipped."""
        steps = []
        for entry in entries:
            if entry.element is None:
                continue
            steps.append(JourneyStep(
                element_ref=entry.element.to_ref(),
                description=entry.element.label,
                order=len(steps) + 1
            ))
        return steps

    def record(self, leaf: PathEntry, decision: Decision) -> Journey:
        """
        Build a Journey from the path ending at leaf.

        Args:
            leaf: Last entry of the current path
            decision: The complete decision that ended the path

        Returns:
            New Journey (pending unless auto-save is on)
        """
        entries = self.walk(leaf)
        steps = self.to_steps(entries)

        name = decision.journey_name
        if not name:
            labels = [step.description for step in steps if step.description]
            if labels:
                name = "Journey: " + " → ".join(labels)
            else:
                name = f"Journey to {entries[-1].title or entries[-1].url}"

        journey = Journey(
            id=str(uuid.uuid4()),
            name=name,
            confidence=decision.confidence,
            completion_reason=decision.completion_reason or decision.reasoning,
            steps=steps,
            path=[entry.to_record() for entry in entries],
            status="confirmed" if self.auto_save else "pending",
            start_url=entries[0].url,
            end_url=entries[-1].url
        )

        log.info(f"Recorded journey '{journey.name}' with {len(steps)} steps")
        return journey
