"""Deterministic stand-ins for the live page and the LLM oracle."""

from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set, Tuple

from wayfinder.core import (
    ClassificationResult,
    Decision,
    DecisionOracle,
    ElementNotFound,
    MeaningfulElement,
    OracleUnavailable,
    PageContext,
    PageDriver,
    RawElement
)

BASE = "https://app.test"


@dataclass
class FakePage:
    title: str
    # (selector, label, destination path)
    links: List[Tuple[str, str, str]] = field(default_factory=list)


class FakePageDriver(PageDriver):
    """In-memory site map with a browser-like history stack."""

    def __init__(self, pages: Dict[str, FakePage], start: str = "/", missing: Optional[Set[str]] = None):
        self.pages = pages
        self.current = start
        self.history: List[str] = []
        self.missing = missing or set()
        self.extract_calls: Counter = Counter()
        self.clicks: List[str] = []
        self.go_backs = 0
        self.log: List[str] = []

    @staticmethod
    def url(path: str) -> str:
        return BASE + path

    async def extract_interactable_elements(self) -> List[RawElement]:
        self.extract_calls[self.current] += 1
        page = self.pages[self.current]
        return [
            RawElement(type="button", tag_name="button", selector=selector, text=label)
            for selector, label, _ in page.links
        ]

    async def click(self, selector: str):
        page = self.pages[self.current]
        targets = {sel: dest for sel, _, dest in page.links}
        if selector in self.missing or selector not in targets:
            raise ElementNotFound(selector)
        self.clicks.append(selector)
        self.log.append(f"click:{selector}")
        self.history.append(self.current)
        self.current = targets[selector]

    async def go_back(self):
        self.go_backs += 1
        self.log.append("back")
        if self.history:
            self.current = self.history.pop()

    async def wait_until_settled(self, timeout_ms: int) -> bool:
        return True

    async def capture_page_context(self) -> PageContext:
        page = self.pages[self.current]
        return PageContext(url=self.url(self.current), title=page.title, visible_text=page.title)


Policy = Callable[[str, List[MeaningfulElement], List[MeaningfulElement]], Decision]


class FakeOracle(DecisionOracle):
    """
    Every raw element is meaningful. By default the first unvisited element is
    clicked, and pages listed in `complete_on` end the journey.
    """

    def __init__(
        self,
        complete_on: Optional[Set[str]] = None,
        fail_on_decide: Optional[Set[int]] = None,
        policy: Optional[Policy] = None
    ):
        self.complete_on = {FakePageDriver.url(path) for path in (complete_on or set())}
        self.fail_on_decide = fail_on_decide or set()
        self.policy = policy
        self.classify_calls: Counter = Counter()
        self.decide_calls: List[Tuple[str, Tuple[str, ...]]] = []
        # The engine swallows branch errors, so visited candidates are also kept here
        self.visited_candidates: List[str] = []

    async def classify(self, url, title, visible_text, raw_elements) -> ClassificationResult:
        self.classify_calls[url] += 1
        return ClassificationResult(
            meaningful_elements=[
                MeaningfulElement(type=el.type, label=el.text, context=f"opens {el.text}", selector=el.selector)
                for el in raw_elements
            ],
            page_summary=f"Summary of {title}"
        )

    async def decide_next(self, meaningful_elements, page_summary, journey_so_far, url) -> Decision:
        candidates = list(meaningful_elements)
        self.decide_calls.append((url, tuple(el.selector for el in candidates)))
        visited = [el.selector for el in candidates if el.visited]
        if visited:
            self.visited_candidates.extend(visited)
            raise AssertionError(f"decide_next received visited elements: {visited}")

        if len(self.decide_calls) in self.fail_on_decide:
            raise OracleUnavailable(f"scripted failure on call {len(self.decide_calls)}")

        if url in self.complete_on:
            return Decision.complete(reasoning=f"{url} ends the flow", confidence=90)

        if not candidates:
            return Decision.complete(reasoning="nothing left", completion_reason="No more unvisited paths")

        if self.policy:
            return self.policy(url, candidates, journey_so_far)

        return Decision.click(candidates[0].selector, reasoning="first unvisited", confidence=70)


def chain_site(length: int, extra_elements: int = 0) -> Dict[str, FakePage]:
    """Pages /0 -> /1 -> ... each with a single 'next' link plus optional filler."""
    pages = {}
    for i in range(length):
        links = [(f"next{i}", "Next", f"/{i + 1}")]
        links += [(f"filler{i}-{j}", f"Filler {j}", f"/{i}") for j in range(extra_elements)]
        pages[f"/{i}"] = FakePage(title=f"Page {i}", links=links)
    pages[f"/{length}"] = FakePage(title=f"Page {length}", links=[(f"next{length}", "Next", f"/{length}")])
    return pages
