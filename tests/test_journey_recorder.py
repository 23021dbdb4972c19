"""Tests for converting traversal paths into journeys."""

import json

from wayfinder.core import Decision, JourneyRecorder, MeaningfulElement, PathEntry


def element(selector, label):
    return MeaningfulElement(type="link", label=label, context="", selector=selector, text=label)


def build_path():
    root = PathEntry(node_key="home_default", url="https://app.test/", title="Home", depth=0)
    accounts = PathEntry(
        node_key="accounts_accounts", url="https://app.test/accounts", title="Accounts",
        depth=1, element=element("//a[1]", "Accounts"), reasoning="start", parent=root
    )
    detail = PathEntry(
        node_key="accounts/1_checking", url="https://app.test/accounts/1", title="Checking",
        depth=2, element=element("//a[2]", "Checking"), reasoning="drill down", parent=accounts
    )
    return detail


def test_steps_skip_root_and_keep_order():
    """One ordered step per click, starting at 1."""
    journey = JourneyRecorder().record(build_path(), Decision.complete(confidence=80))

    assert [s.order for s in journey.steps] == [1, 2]
    assert [s.description for s in journey.steps] == ["Accounts", "Checking"]
    assert journey.steps[1].element_ref["selector"] == "//a[2]"
    assert all(s.type == "click" for s in journey.steps)


def test_name_falls_back_to_labels():
    """Without an oracle name the labels are joined."""
    journey = JourneyRecorder().record(build_path(), Decision.complete())
    assert journey.name == "Journey: Accounts → Checking"


def test_oracle_name_and_reason_win():
    """Name and reason supplied by the decision are used as-is."""
    decision = Decision.complete(
        reasoning="detail view reached",
        confidence=92,
        journey_name="View checking account",
        completion_reason="Account detail shown"
    )
    journey = JourneyRecorder().record(build_path(), decision)

    assert journey.name == "View checking account"
    assert journey.completion_reason == "Account detail shown"
    assert journey.confidence == 92


def test_reason_defaults_to_reasoning():
    journey = JourneyRecorder().record(build_path(), Decision.complete(reasoning="deep enough"))
    assert journey.completion_reason == "deep enough"


def test_status_follows_auto_save():
    """Journeys are pending for review unless auto-save is on."""
    assert JourneyRecorder().record(build_path(), Decision.complete()).status == "pending"
    assert JourneyRecorder(auto_save=True).record(build_path(), Decision.complete()).status == "confirmed"


def test_serialized_path_has_no_back_references():
    """Path records run root to leaf and are plain JSON."""
    records = JourneyRecorder.serialize_path(build_path())

    assert [r["node_key"] for r in records] == ["home_default", "accounts_accounts", "accounts/1_checking"]
    assert records[0]["element"] is None
    assert all("parent" not in r for r in records)
    json.dumps(records)


def test_urls_and_unique_ids():
    recorder = JourneyRecorder()
    first = recorder.record(build_path(), Decision.complete())
    second = recorder.record(build_path(), Decision.complete())

    assert first.start_url == "https://app.test/"
    assert first.end_url == "https://app.test/accounts/1"
    assert first.id != second.id
