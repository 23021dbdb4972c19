"""Core components of the Wayfinder explorer."""

from .errors import (
    ExplorationError,
    ElementNotFound,
    OracleUnavailable,
    NavigationTimeout,
    MaxRoundsExceeded
)
from .models import (
    RawElement,
    MeaningfulElement,
    PageContext,
    PageNode,
    ClassificationResult,
    Decision,
    PathEntry,
    JourneyStep,
    Journey
)
from .storage import Storage, MemoryStorage, JsonFileStorage
from .journey_cache import JourneyCache, NAMESPACE
from .page_driver import PageDriver
from .decision_oracle import DecisionOracle
from .completion import CompletionHeuristic
from .path_tracker import PathTracker
from .events import EventType, ExplorationEvent, EventChannel
from .journey_recorder import JourneyRecorder
from .journey_store import JourneyStore
from .exploration_engine import ExplorationEngine

__all__ = [
    'ExplorationError',
    'ElementNotFound',
    'OracleUnavailable',
    'NavigationTimeout',
    'MaxRoundsExceeded',
    'RawElement',
    'MeaningfulElement',
    'PageContext',
    'PageNode',
    'ClassificationResult',
    'Decision',
    'PathEntry',
    'JourneyStep',
    'Journey',
    'Storage',
    'MemoryStorage',
    'JsonFileStorage',
    'JourneyCache',
    'NAMESPACE',
    'PageDriver',
    'DecisionOracle',
    'CompletionHeuristic',
    'PathTracker',
    'EventType',
    'ExplorationEvent',
    'EventChannel',
    'JourneyRecorder',
    'JourneyStore',
    'ExplorationEngine'
]
