"""Contract for the component that judges pages and picks the next click."""

from abc import ABC, abstractmethod
from typing import List

from .models import RawElement, MeaningfulElement, ClassificationResult, Decision


class DecisionOracle(ABC):
    """
    Classifies a page once, then decides each next step.

    Implementations raise OracleUnavailable for any transport or parse failure.
    The engine never retries a failed call.
    """

    @abstractmethod
    async def classify(
        self,
        url: str,
        title: str,
        visible_text: str,
        raw_elements: List[RawElement]
    ) -> ClassificationResult:
        """
        Reduce raw elements to the meaningful ones.

        Near-duplicates collapse to one representative and utility elements
        (logout, legal, help, settings, social, cookie banners) are dropped.
        """

    @abstractmethod
    async def decide_next(
        self,
        meaningful_elements: List[MeaningfulElement],
        page_summary: str,
        journey_so_far: List[MeaningfulElement],
        url: str
    ) -> Decision:
        """
        Choose a click or declare the journey complete.

        The engine passes only unvisited elements. An empty list means the
        page is a dead end, and the answer must be a complete decision.
        """
