"""Data records shared by the cache, engine, oracle and recorder."""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Dict, Any, List, Optional, Literal

ActionType = Literal["click", "complete"]
JourneyStatus = Literal["pending", "confirmed", "discarded"]


@dataclass
class RawElement:
    """An interactable element as extracted from the live page."""
    type: str
    tag_name: str
    selector: str
    text: str = ""
    event_listeners: List[str] = field(default_factory=list)
    aria_label: Optional[str] = None
    role: Optional[str] = None
    href: Optional[str] = None
    input_type: Optional[str] = None
    placeholder: Optional[str] = None
    name: Optional[str] = None
    element_id: Optional[str] = None
    associated_label: Optional[str] = None
    surrounding_text: Optional[str] = None
    position: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RawElement":
        """Create from dictionary."""
        return cls(**data)


@dataclass
class MeaningfulElement:
    """A classified element worth exploring. `visited` only ever goes False -> True."""
    type: str
    label: str
    context: str
    selector: str
    visited: bool = False
    text: Optional[str] = None
    accessible_label: Optional[str] = None
    href: Optional[str] = None

    def mark_visited(self):
        self.visited = True

    def to_ref(self) -> Dict[str, Any]:
        """Plain reference used inside journey steps."""
        return {
            "selector": self.selector,
            "type": self.type,
            "label": self.label,
            "text": self.text,
            "accessible_label": self.accessible_label,
            "href": self.href
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MeaningfulElement":
        """Create from dictionary."""
        return cls(**data)


@dataclass
class PageContext:
    """Snapshot of what the page currently shows."""
    url: str
    title: str = ""
    main_heading: str = ""
    visible_text: str = ""
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class PageNode:
    """One analyzed page, keyed by (normalized url, entry action)."""
    key: str
    url: str
    page_summary: str
    meaningful_elements: List[MeaningfulElement]
    all_elements: List[RawElement] = field(default_factory=list)
    title: str = ""
    parent_key: Optional[str] = None
    child_keys: List[str] = field(default_factory=list)
    scanned_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def unvisited_elements(self) -> List[MeaningfulElement]:
        """Meaningful elements not yet explored, in classification order."""
        return [el for el in self.meaningful_elements if not el.visited]

    def find_element(self, selector: str) -> Optional[MeaningfulElement]:
        """Look up a meaningful element by selector."""
        for element in self.meaningful_elements:
            if element.selector == selector:
                return element
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "key": self.key,
            "url": self.url,
            "title": self.title,
            "page_summary": self.page_summary,
            "meaningful_elements": [el.to_dict() for el in self.meaningful_elements],
            "all_elements": [el.to_dict() for el in self.all_elements],
            "parent_key": self.parent_key,
            "child_keys": list(self.child_keys),
            "scanned_at": self.scanned_at
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PageNode":
        """Create from dictionary. Raises KeyError/TypeError on malformed data."""
        return cls(
            key=data["key"],
            url=data["url"],
            title=data.get("title", ""),
            page_summary=data.get("page_summary", ""),
            meaningful_elements=[
                MeaningfulElement.from_dict(el) for el in data["meaningful_elements"]
            ],
            all_elements=[RawElement.from_dict(el) for el in data.get("all_elements", [])],
            parent_key=data.get("parent_key"),
            child_keys=list(data.get("child_keys", [])),
            scanned_at=data.get("scanned_at") or datetime.now().isoformat()
        )


@dataclass
class ClassificationResult:
    """Oracle output for a one-time page classification."""
    meaningful_elements: List[MeaningfulElement]
    page_summary: str


@dataclass
class Decision:
    """Oracle (or heuristic) verdict for the current page."""
    action: ActionType
    reasoning: str = ""
    confidence: int = 0
    selector: Optional[str] = None
    is_complete: bool = False
    journey_name: Optional[str] = None
    completion_reason: Optional[str] = None
    element_description: Optional[str] = None

    @classmethod
    def click(cls, selector: str, reasoning: str = "", confidence: int = 50,
              element_description: Optional[str] = None) -> "Decision":
        return cls(
            action="click",
            selector=selector,
            reasoning=reasoning,
            confidence=confidence,
            element_description=element_description
        )

    @classmethod
    def complete(cls, reasoning: str = "", confidence: int = 100,
                 journey_name: Optional[str] = None,
                 completion_reason: Optional[str] = None) -> "Decision":
        return cls(
            action="complete",
            reasoning=reasoning,
            confidence=confidence,
            is_complete=True,
            journey_name=journey_name,
            completion_reason=completion_reason
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class PathEntry:
    """One hop of the in-progress traversal. Transient, never persisted as-is."""
    node_key: str
    url: str
    title: str = ""
    depth: int = 0
    element: Optional[MeaningfulElement] = None
    reasoning: str = ""
    parent: Optional["PathEntry"] = None

    def to_record(self) -> Dict[str, Any]:
        """Plain record without the parent back-reference."""
        return {
            "node_key": self.node_key,
            "url": self.url,
            "title": self.title,
            "depth": self.depth,
            "element": self.element.to_ref() if self.element else None,
            "reasoning": self.reasoning
        }


@dataclass
class JourneyStep:
    """A single click in a recorded journey."""
    element_ref: Dict[str, Any]
    description: str
    order: int
    type: str = "click"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class Journey:
    """A completed traversal, ready for user confirmation."""
    id: str
    name: str
    confidence: int
    completion_reason: str
    steps: List[JourneyStep]
    path: List[Dict[str, Any]] = field(default_factory=list)
    status: JourneyStatus = "pending"
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())
    start_url: str = ""
    end_url: str = ""

    @property
    def selectors(self) -> List[str]:
        """Ordered selectors clicked along the journey."""
        return [step.element_ref.get("selector", "") for step in self.steps]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "confidence": self.confidence,
            "completion_reason": self.completion_reason,
            "steps": [step.to_dict() for step in self.steps],
            "path": list(self.path),
            "status": self.status,
            "created_at": self.created_at,
            "start_url": self.start_url,
            "end_url": self.end_url
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Journey":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            name=data["name"],
            confidence=data.get("confidence", 0),
            completion_reason=data.get("completion_reason", ""),
            steps=[JourneyStep(**step) for step in data.get("steps", [])],
            path=list(data.get("path", [])),
            status=data.get("status", "pending"),
            created_at=data.get("created_at") or datetime.now().isoformat(),
            start_url=data.get("start_url", ""),
            end_url=data.get("end_url", "")
        )
