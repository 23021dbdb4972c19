"""Tests for the page cache and its storage backends."""

import json

import pytest

from wayfinder.core import (
    JourneyCache,
    JsonFileStorage,
    MeaningfulElement,
    MemoryStorage,
    NAMESPACE,
    PageNode
)


def make_node(key="https://app.test/home_default", selectors=("a", "b")):
    return PageNode(
        key=key,
        url="https://app.test/home",
        page_summary="Home page",
        meaningful_elements=[
            MeaningfulElement(type="button", label=s.upper(), context="", selector=s)
            for s in selectors
        ]
    )


@pytest.mark.parametrize("url,label,expected", [
    ("https://app.test/home", None, "https://app.test/home_default"),
    ("https://app.test/home/", None, "https://app.test/home_default"),
    ("https://app.test/home?tab=2", None, "https://app.test/home_default"),
    ("https://app.test/home", "View  All\tAccounts", "https://app.test/home_viewallaccounts"),
    ("https://app.test/home/?x=1", "Open", "https://app.test/home_open"),
])
def test_generate_key(url, label, expected):
    """Keys drop the query and trailing slash and squash the entry label."""
    assert JourneyCache.generate_key(url, label) == expected


def test_generate_key_distinguishes_entry_actions():
    """Same page reached through different actions gets different keys."""
    url = "https://app.test/list"
    assert JourneyCache.generate_key(url, "Details") != JourneyCache.generate_key(url, "Edit")
    assert JourneyCache.generate_key(url) == JourneyCache.generate_key(url, "")


def test_put_and_get():
    """Stored nodes are retrievable by key."""
    cache = JourneyCache()
    node = make_node()
    cache.put(node.key, node)

    assert cache.has(node.key)
    assert node.key in cache
    assert cache.get(node.key) is node
    assert len(cache) == 1
    assert cache.get("missing") is None


def test_mark_visited_is_noop_for_unknown_targets():
    """Marking an absent node or element changes nothing."""
    cache = JourneyCache()
    node = make_node()
    cache.put(node.key, node)

    cache.mark_visited("nope", "a")
    cache.mark_visited(node.key, "zzz")

    assert node.unvisited_elements() == node.meaningful_elements


def test_overwrite_keeps_visited_flags():
    """Re-putting a node never resets an element that was already visited."""
    cache = JourneyCache()
    original = make_node()
    cache.put(original.key, original)
    cache.mark_visited(original.key, "a")
    cache.link_child(original.key, "child_key")

    replacement = make_node()
    cache.put(replacement.key, replacement)

    stored = cache.get(original.key)
    assert stored.find_element("a").visited is True
    assert stored.find_element("b").visited is False
    assert stored.child_keys == ["child_key"]


def test_link_child_is_idempotent():
    """Linking the same child twice records it once."""
    cache = JourneyCache()
    node = make_node()
    cache.put(node.key, node)

    cache.link_child(node.key, "c1")
    cache.link_child(node.key, "c1")
    cache.link_child(node.key, "c2")
    cache.link_child("unknown_parent", "c3")

    assert cache.get(node.key).child_keys == ["c1", "c2"]


def test_every_mutation_is_persisted():
    """The storage always mirrors the in-memory map."""
    storage = MemoryStorage()
    cache = JourneyCache(storage)
    node = make_node()

    cache.put(node.key, node)
    assert node.key in storage.load(NAMESPACE)

    cache.mark_visited(node.key, "b")
    assert storage.load(NAMESPACE)[node.key]["meaningful_elements"][1]["visited"] is True

    cache.clear()
    assert storage.load(NAMESPACE) == {}


def test_reload_from_file_storage(tmp_path):
    """A new cache over the same directory sees earlier nodes and flags."""
    cache = JourneyCache(JsonFileStorage(tmp_path))
    node = make_node()
    cache.put(node.key, node)
    cache.mark_visited(node.key, "a")

    reloaded = JourneyCache(JsonFileStorage(tmp_path))

    assert reloaded.has(node.key)
    assert reloaded.get(node.key).find_element("a").visited is True
    assert (tmp_path / f"{NAMESPACE}.json").exists()


def test_empty_or_missing_store_loads_empty(tmp_path):
    """First run and blank files both yield an empty cache."""
    assert len(JourneyCache(JsonFileStorage(tmp_path))) == 0

    (tmp_path / f"{NAMESPACE}.json").write_text("")
    assert len(JourneyCache(JsonFileStorage(tmp_path))) == 0


def test_malformed_entries_are_dropped(tmp_path):
    """Broken records are skipped while valid ones still load."""
    good = make_node()
    data = {
        good.key: good.to_dict(),
        "broken": {"url": "https://app.test/x"},
        "wrong_type": "not a node",
    }
    (tmp_path / f"{NAMESPACE}.json").write_text(json.dumps(data))

    cache = JourneyCache(JsonFileStorage(tmp_path))

    assert [n.key for n in cache.nodes()] == [good.key]


def test_snapshot_is_plain_data():
    """Snapshots are JSON-serializable and detached from live nodes."""
    cache = JourneyCache()
    node = make_node()
    cache.put(node.key, node)

    snapshot = cache.snapshot()
    json.dumps(snapshot)
    snapshot[node.key]["child_keys"].append("x")

    assert cache.get(node.key).child_keys == []
