"""Configuration management for the Wayfinder explorer."""

import os
import platform
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Literal
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from .logger import log

# Load environment variables
load_dotenv()


class ExplorationConfig(BaseModel):
    """Tuning for a single exploration session. Built once, never mutated."""
    model_config = ConfigDict(frozen=True)

    max_depth: int = Field(default=10, ge=1)
    inter_action_delay: int = Field(default=2000, ge=0)  # milliseconds
    auto_save_journeys: bool = False
    strategy: Literal["ai-guided"] = "ai-guided"
    max_rounds: int = Field(default=20, ge=1)
    settle_timeout: int = Field(default=5000, ge=0)  # milliseconds

    auto_complete_enabled: bool = True
    auto_complete_min_steps: int = Field(default=4, ge=1)
    auto_complete_element_threshold: int = Field(default=30, ge=1)
    auto_complete_max_steps: int = Field(default=5, ge=1)
    auto_complete_confidence: int = Field(default=85, ge=0, le=100)


class TargetConfig(BaseModel):
    """Configuration for a single application under exploration."""
    name: str
    start_url: str
    description: str = ""
    wait_for_navigation: float = 3.0
    page_load_timeout: int = 30000
    action_timeout: int = 7000
    exploration: Dict[str, Any] = Field(default_factory=dict)


class Config:
    """Main configuration class."""

    def __init__(self):
        self.home_dir = Path(os.getenv("WAYFINDER_HOME", str(Path.cwd())))
        self.config_dir = Path(os.getenv("WAYFINDER_CONFIG_DIR", str(self.home_dir / "config")))
        self.data_dir = Path(os.getenv("WAYFINDER_DATA_DIR", str(self.home_dir / "data")))
        self.cache_dir = self.data_dir / "cache"
        self.journeys_file = self.data_dir / "journeys.json"
        self.exports_dir = self.data_dir / "exports"

        # API Keys
        self.openai_api_key = os.getenv("OPENAI_API_KEY")
        self.anthropic_api_key = os.getenv("ANTHROPIC_API_KEY")
        self.llm_provider = os.getenv("LLM_PROVIDER", "openai")

        # General Settings
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self.headless = os.getenv("HEADLESS", "false").lower() == "true"
        default_browser = "chromium"
        if platform.system().lower() == "darwin":
            default_browser = "webkit"
        self.browser_type = os.getenv("PLAYWRIGHT_BROWSER", default_browser)

        # Load exploration defaults and targets
        raw = self._load_targets_file()
        self.exploration_defaults: Dict[str, Any] = raw.get("default", {}) or {}
        self.targets: Dict[str, TargetConfig] = self._load_targets(raw)

        # Create necessary directories
        self._ensure_directories()

    def _load_targets_file(self) -> Dict[str, Any]:
        """Read config/targets.yaml, returning an empty mapping when absent."""
        targets_file = self.config_dir / "targets.yaml"
        if not targets_file.exists():
            return {}

        with open(targets_file, 'r') as f:
            data = yaml.safe_load(f)

        return data or {}

    def _load_targets(self, raw: Dict[str, Any]) -> Dict[str, TargetConfig]:
        """Build TargetConfig objects from the parsed YAML."""
        targets = {}
        for target_id, target_data in (raw.get("targets") or {}).items():
            try:
                targets[target_id] = TargetConfig(**target_data)
            except Exception as e:
                log.warning(f"Failed to load config for target {target_id}: {e}")

        return targets

    def _ensure_directories(self):
        """Create necessary directories if they don't exist."""
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.exports_dir.mkdir(parents=True, exist_ok=True)

    def get_target_config(self, target_name: str) -> Optional[TargetConfig]:
        """Get configuration for a specific target."""
        return self.targets.get(target_name.lower())

    def exploration_config(
        self,
        target: Optional[TargetConfig] = None,
        **overrides: Any
    ) -> ExplorationConfig:
        """
        Build the immutable exploration config for a session.

        Later sources win: YAML defaults, then target overrides, then keyword
        overrides (typically from CLI flags). None values are ignored.

        Args:
            target: Optional target whose `exploration` block applies
            **overrides: Field overrides

        Returns:
            Frozen ExplorationConfig
        """
        values: Dict[str, Any] = dict(self.exploration_defaults)
        if target:
            values.update(target.exploration)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return ExplorationConfig(**values)


# Global config instance
config = Config()
