"""Concrete page drivers and decision oracles."""

from .playwright_driver import PlaywrightPageDriver
from .llm_oracle import LLMDecisionOracle, is_noise

__all__ = [
    'PlaywrightPageDriver',
    'LLMDecisionOracle',
    'is_noise'
]
