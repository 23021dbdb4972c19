"""Local completion heuristic that short-circuits the oracle on deep paths."""

from typing import Optional

from .models import Decision
from ..utils import log, ExplorationConfig


class CompletionHeuristic:
    """Declares a journey complete once it is deep enough, without asking the oracle."""

    def __init__(self, exploration_config: ExplorationConfig):
        self.enabled = exploration_config.auto_complete_enabled
        self.min_steps = exploration_config.auto_complete_min_steps
        self.element_threshold = exploration_config.auto_complete_element_threshold
        self.max_steps = exploration_config.auto_complete_max_steps
        self.confidence = exploration_config.auto_complete_confidence

    def evaluate(self, steps_taken: int, visible_element_count: int) -> Optional[Decision]:
        """
        Check whether the current path should end here.

        Args:
            steps_taken: Clicks on the current path (root excluded)
            visible_element_count: Raw interactable elements on the current page

        Returns:
            A synthetic complete Decision, or None to defer to the oracle
        """
        if not self.enabled or steps_taken < self.min_steps:
            return None

        if visible_element_count >= self.element_threshold or steps_taken >= self.max_steps:
            log.info(
                f"Auto-completing journey at {steps_taken} steps "
                f"({visible_element_count} elements on page)"
            )
            return Decision.complete(
                reasoning=f"Path reached {steps_taken} steps on a page with {visible_element_count} elements",
                confidence=self.confidence,
                completion_reason="reached sufficient depth"
            )

        return None
