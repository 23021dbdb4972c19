"""Exploration engine that walks the app, records journeys and backtracks."""

import asyncio
from typing import Any, Callable, Dict, List, Optional

from .decision_oracle import DecisionOracle
from .errors import ElementNotFound, MaxRoundsExceeded, NavigationTimeout, OracleUnavailable
from .events import EventChannel, EventType, Listener
from .completion import CompletionHeuristic
from .journey_cache import JourneyCache
from .journey_recorder import JourneyRecorder
from .journey_store import JourneyStore
from .models import Decision, Journey, MeaningfulElement, PageContext, PageNode, PathEntry
from .page_driver import PageDriver
from .path_tracker import PathTracker
from ..utils import log, ExplorationConfig


class ExplorationEngine:
    """
    Depth-first, cached, backtracking walk over the app's pages.

    For every page: scan once (extract + classify, cached by key), then pick
    unvisited elements one at a time, click, recurse into the result and
    navigate back before trying the next element. Branches run strictly one
    after another on a single page session.
    """

    def __init__(
        self,
        driver: PageDriver,
        oracle: DecisionOracle,
        exploration_config: Optional[ExplorationConfig] = None,
        cache: Optional[JourneyCache] = None,
        store: Optional[JourneyStore] = None
    ):
        """
        Initialize the engine.

        Args:
            driver: Live page to explore
            oracle: Classifier and decision maker
            exploration_config: Session tuning (defaults apply when omitted)
            cache: Page cache (in-memory when omitted)
            store: Journey store; auto-saved journeys are added here
        """
        self.driver = driver
        self.oracle = oracle
        self.config = exploration_config or ExplorationConfig()
        self.cache = cache or JourneyCache()
        self.store = store
        self.recorder = JourneyRecorder(auto_save=self.config.auto_save_journeys)
        self.completion = CompletionHeuristic(self.config)
        self.tracker = PathTracker()
        self.events = EventChannel()

        self.journeys: List[Journey] = []
        self.root_key: Optional[str] = None
        self.is_running = False
        self.rounds = 0
        self.clicks = 0
        self.pages_scanned = 0
        self.current_depth = 0

        self._resume = asyncio.Event()
        self._resume.set()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register an event callback. Returns an unsubscribe function."""
        return self.events.subscribe(listener)

    async def start(self) -> List[Journey]:
        """
        Explore from the page the driver is currently on.

        Rounds restart from the initial page until it has no unvisited
        elements, a round makes no clicks, or the round cap is reached.

        Returns:
            Journeys found during this session
        """
        if self.is_running:
            raise RuntimeError("Exploration already running")

        self.is_running = True
        self.rounds = 0
        self.events.emit(EventType.STARTED, max_depth=self.config.max_depth, strategy=self.config.strategy)

        try:
            context = await self.driver.capture_page_context()
            self.root_key = JourneyCache.generate_key(context.url)
            log.info(f"Starting exploration at {context.url} (key {self.root_key})")

            while True:
                if self.rounds >= self.config.max_rounds:
                    raise MaxRoundsExceeded(self.rounds)

                self.rounds += 1
                clicks_before = self.clicks
                log.info(f"Exploration round {self.rounds}/{self.config.max_rounds}")

                root = PathEntry(
                    node_key=self.root_key,
                    url=context.url,
                    title=context.title,
                    depth=0
                )
                self.tracker.reset()
                try:
                    await self._explore_node(root, context)
                except OracleUnavailable as e:
                    log.error(f"Oracle unavailable on the initial page: {e}")
                    self.events.emit(EventType.ERROR, message=str(e), key=self.root_key)

                root_node = self.cache.get(self.root_key)
                if root_node is None or not root_node.unvisited_elements():
                    log.info("Initial page fully explored")
                    break
                if self.clicks == clicks_before:
                    log.info("Round made no progress, stopping")
                    break

        except MaxRoundsExceeded as e:
            log.warning(str(e))
        except Exception as e:
            log.exception("Exploration failed")
            self.events.emit(EventType.ERROR, message=str(e))
            raise
        finally:
            self.is_running = False

        self.events.emit(EventType.COMPLETED, journeys=len(self.journeys), rounds=self.rounds)
        log.info(f"Exploration finished: {len(self.journeys)} journeys in {self.rounds} rounds")
        return list(self.journeys)

    def pause(self):
        """Stop entering new pages until resume() is called."""
        if not self._resume.is_set():
            return
        self._resume.clear()
        log.info("Exploration paused")
        self.events.emit(EventType.PAUSED)

    def resume(self):
        if self._resume.is_set():
            return
        log.info("Exploration resumed")
        self._resume.set()

    @property
    def is_paused(self) -> bool:
        return not self._resume.is_set()

    def get_journeys(self) -> List[Journey]:
        return list(self.journeys)

    def get_progress(self) -> Dict[str, Any]:
        """Get current exploration progress information."""
        return {
            "running": self.is_running,
            "paused": self.is_paused,
            "rounds": self.rounds,
            "pages_scanned": self.pages_scanned,
            "pages_cached": len(self.cache),
            "clicks": self.clicks,
            "current_depth": self.current_depth,
            "journeys_found": len(self.journeys)
        }

    async def _explore_node(self, entry: PathEntry, context: PageContext):
        """Scan one page and work through its unvisited elements."""
        if entry.depth >= self.config.max_depth:
            log.debug(f"Depth limit reached at {entry.node_key}")
            return

        await self._resume.wait()
        self.current_depth = entry.depth
        node = await self._scan(entry, context)
        first_pass = True

        while True:
            await self._resume.wait()

            # A page just reached by a click gets one decision even when it is a dead end
            unvisited = node.unvisited_elements()
            if not unvisited and not (first_pass and entry.element is not None):
                log.debug(f"No unvisited elements left on {node.key}")
                return
            first_pass = False

            decision = self.completion.evaluate(entry.depth, len(node.all_elements))
            if decision is None:
                decision = await self.oracle.decide_next(
                    unvisited,
                    node.page_summary,
                    self._journey_so_far(entry),
                    node.url
                )

            if decision.is_complete or decision.action == "complete":
                self._complete(entry, decision)
                return

            element = node.find_element(decision.selector) if decision.selector else None
            if element is None or element.visited:
                log.warning(f"Decision picked unknown or visited element {decision.selector!r} on {node.key}")
                return

            self.cache.mark_visited(node.key, element.selector)

            if self.tracker.should_skip(node.url, element.selector):
                continue

            try:
                log.info(f"[depth {entry.depth}] Clicking '{element.label}' on {node.url}")
                await self.driver.click(element.selector)
            except ElementNotFound as e:
                log.warning(f"{e}; moving on to the next element")
                continue

            self.clicks += 1
            self.tracker.push(node.url, element.selector)
            branch = f"{node.key} -> {element.label}"

            try:
                await self._settle()
                child_context = await self.driver.capture_page_context()
                child_key = JourneyCache.generate_key(child_context.url, element.label)
                self.cache.link_child(node.key, child_key)
                branch = child_key

                child = PathEntry(
                    node_key=child_key,
                    url=child_context.url,
                    title=child_context.title,
                    depth=entry.depth + 1,
                    element=element,
                    reasoning=decision.reasoning,
                    parent=entry
                )
                await self._explore_node(child, child_context)
            except OracleUnavailable as e:
                log.error(f"Oracle unavailable on {branch}, abandoning branch: {e}")
                self.events.emit(EventType.ERROR, message=str(e), key=branch)
            except Exception as e:
                log.exception(f"Branch {branch} failed")
                self.events.emit(EventType.ERROR, message=str(e), key=branch)
            finally:
                self.tracker.pop()
                await self._backtrack()
                self.current_depth = entry.depth

    async def _scan(self, entry: PathEntry, context: PageContext) -> PageNode:
        """Return the cached node, extracting and classifying only on first sight."""
        node = self.cache.get(entry.node_key)
        if node is not None:
            log.debug(f"Cache hit for {entry.node_key}")
            return node

        raw_elements = await self.driver.extract_interactable_elements()
        result = await self.oracle.classify(
            context.url,
            context.title,
            context.visible_text,
            raw_elements
        )

        node = PageNode(
            key=entry.node_key,
            url=context.url,
            title=context.title,
            page_summary=result.page_summary,
            meaningful_elements=result.meaningful_elements,
            all_elements=raw_elements,
            parent_key=entry.parent.node_key if entry.parent else None
        )
        self.cache.put(node.key, node)
        self.pages_scanned += 1

        log.info(
            f"Scanned {node.key}: {len(raw_elements)} elements, "
            f"{len(node.meaningful_elements)} meaningful"
        )
        self.events.emit(EventType.PAGE_SCANNED, key=node.key, meaningful_count=len(node.meaningful_elements))
        return node

    def _complete(self, entry: PathEntry, decision: Decision):
        if entry.element is None:
            log.info("Completion on the initial page with no steps, nothing to record")
            return

        journey = self.recorder.record(entry, decision)
        self.journeys.append(journey)

        if self.store is not None and self.config.auto_save_journeys:
            if self.store.has_similar(journey):
                log.info(f"Similar journey already stored, not saving '{journey.name}'")
            else:
                self.store.add(journey)

        self.events.emit(EventType.JOURNEY_FOUND, journey=journey)

    async def _settle(self):
        """Pace the session, then wait for the document to finish loading."""
        await asyncio.sleep(self.config.inter_action_delay / 1000)
        settled = await self.driver.wait_until_settled(self.config.settle_timeout)
        if not settled:
            log.warning(f"Page did not settle within {self.config.settle_timeout}ms, continuing")

    async def _backtrack(self):
        try:
            await self.driver.go_back()
        except NavigationTimeout as e:
            log.warning(f"Back navigation timed out, continuing: {e}")
        except Exception as e:
            log.error(f"Back navigation failed, continuing: {e}")
            self.events.emit(EventType.ERROR, message=f"Back navigation failed: {e}")
        await self._settle()

    @staticmethod
    def _journey_so_far(entry: PathEntry) -> List[MeaningfulElement]:
        elements: List[MeaningfulElement] = []
        current = entry
        while current is not None:
            if current.element is not None:
                elements.append(current.element)
            current = current.parent
        elements.reverse()
        return elements
