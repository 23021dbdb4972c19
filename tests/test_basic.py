"""Basic tests to verify the system is wired up."""

import pytest
from pydantic import ValidationError

from wayfinder.utils import config, console, create_progress, ExplorationConfig, summarize_page_text, normalize_url
from wayfinder.core import CompletionHeuristic, Decision, PathTracker


def test_config_loaded():
    """Test that configuration loads successfully."""
    assert config is not None
    assert config.cache_dir.exists()
    assert config.exports_dir.exists()


def test_targets_config():
    """Test that example targets are configured."""
    assert "demo_bank" in config.targets
    assert config.get_target_config("DEMO_BANK").start_url.startswith("https://")


def test_exploration_config_layering():
    """YAML defaults, then target overrides, then explicit overrides."""
    target = config.get_target_config("demo_bank")

    merged = config.exploration_config(target, inter_action_delay=500, max_rounds=None)

    assert merged.max_depth == 6
    assert merged.inter_action_delay == 500
    assert merged.max_rounds == 20


def test_exploration_config_is_frozen():
    """Session config cannot change once built."""
    exploration = ExplorationConfig()
    assert exploration.max_depth == 10
    assert exploration.inter_action_delay == 2000
    assert exploration.strategy == "ai-guided"

    with pytest.raises(ValidationError):
        exploration.max_depth = 3

    with pytest.raises(ValidationError):
        ExplorationConfig(max_depth=0)


def test_summarize_short_text():
    assert summarize_page_text("  Hello \n\n world  ") == "Hello world"


def test_summarize_long_text():
    """Long text keeps the first five mid-length sentences."""
    sentences = [f"Sentence number {i} talks about accounts" for i in range(20)]
    text = ". ".join(["Hi"] + sentences) + "."

    summary = summarize_page_text(text, max_length=120)

    assert summary.endswith("...")
    assert summary.startswith("Sentence number 0")
    assert len(summary) == 123


def test_normalize_url():
    assert normalize_url("https://app.test/a/?q=1") == "https://app.test/a"
    assert normalize_url("https://app.test/a") == "https://app.test/a"


def test_completion_heuristic_thresholds():
    """Completion needs min steps plus either a busy page or max steps."""
    heuristic = CompletionHeuristic(ExplorationConfig())

    assert heuristic.evaluate(3, 200) is None
    assert heuristic.evaluate(4, 10) is None

    busy = heuristic.evaluate(4, 30)
    assert isinstance(busy, Decision)
    assert busy.is_complete and busy.confidence == 85
    assert busy.completion_reason == "reached sufficient depth"

    assert heuristic.evaluate(5, 1) is not None


def test_completion_heuristic_disabled():
    heuristic = CompletionHeuristic(ExplorationConfig(auto_complete_enabled=False))
    assert heuristic.evaluate(9, 500) is None


def test_path_tracker_detects_cycles():
    """Repeating a hop already on the path is a cycle."""
    tracker = PathTracker()
    tracker.push("https://app.test/", "x")
    tracker.push("https://app.test/b", "y")

    assert tracker.should_skip("https://app.test/?ref=1", "x") is True
    assert tracker.should_skip("https://app.test/b", "z") is False
    assert tracker.signature() == "https://app.test::x → https://app.test/b::y"


def test_path_tracker_remembers_explored_signatures():
    """A full path explored once is not explored again after backtracking."""
    tracker = PathTracker()
    tracker.push("https://app.test/", "x")
    tracker.pop()

    assert tracker.should_skip("https://app.test/", "x") is True
    tracker.reset()
    assert tracker.should_skip("https://app.test/", "y") is False


def test_round_progress_display():
    """The round display counts completed rounds against the cap."""
    with create_progress() as progress:
        task = progress.add_task("Exploring", total=20)
        progress.update(task, completed=3, description="Exploring (depth 2, 1 journeys)")

    assert progress.console is console
    assert progress.tasks[0].completed == 3
    assert progress.tasks[0].total == 20
    assert progress.tasks[0].description == "Exploring (depth 2, 1 journeys)"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
