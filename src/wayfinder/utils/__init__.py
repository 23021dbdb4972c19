"""Utility modules for the Wayfinder explorer."""

from .logger import log, console, create_progress
from .config import config, Config, ExplorationConfig, TargetConfig
from .text_utils import summarize_page_text, collapse_whitespace, normalize_url

__all__ = [
    'config',
    'Config',
    'ExplorationConfig',
    'TargetConfig',
    'log',
    'console',
    'create_progress',
    'summarize_page_text',
    'collapse_whitespace',
    'normalize_url'
]
