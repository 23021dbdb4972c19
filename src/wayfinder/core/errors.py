"""Exception types raised during exploration."""

from typing import Optional


class ExplorationError(Exception):
    """Base class for all exploration failures."""


class ElementNotFound(ExplorationError):
    """No element on the live page matches the selector."""

    def __init__(self, selector: str, message: Optional[str] = None):
        self.selector = selector
        super().__init__(message or f"Element not found: {selector}")


class OracleUnavailable(ExplorationError):
    """The decision oracle could not produce a usable answer."""


class NavigationTimeout(ExplorationError):
    """A navigation step did not finish in time."""


class MaxRoundsExceeded(ExplorationError):
    """The outer exploration loop hit its round cap."""

    def __init__(self, rounds: int):
        self.rounds = rounds
        super().__init__(f"Exploration stopped after {rounds} rounds")
