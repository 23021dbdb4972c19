import os
import sys
import tempfile
from pathlib import Path

import pytest

# Ensure src/ is importable when running pytest without installation
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# The global config reads these on import, so set them before any test module loads
os.environ.setdefault("WAYFINDER_HOME", tempfile.mkdtemp(prefix="wayfinder-tests-"))
os.environ.setdefault("WAYFINDER_CONFIG_DIR", str(ROOT / "config"))
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("ANTHROPIC_API_KEY", "test-anthropic-key")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("HEADLESS", "true")


@pytest.fixture
def fast_config():
    """Exploration config with pacing and auto-completion switched off."""
    from wayfinder.utils import ExplorationConfig

    return ExplorationConfig(
        inter_action_delay=0,
        settle_timeout=0,
        auto_complete_enabled=False
    )
