import pytest

from src.streamdesk.core.notifications import NotificationCenter


def test_loading_then_success_updates_in_place():
    center = NotificationCenter()
    nid = center.loading("Working...")
    same = center.success("Done", notification_id=nid)
    assert same == nid
    assert len(center) == 1
    entry = center.get(nid)
    assert entry.kind == "success"
    assert entry.message == "Done"


def test_error_without_handle_creates_entry_with_duration():
    center = NotificationCenter()
    nid = center.error("boom", duration_sec=5.0)
    entry = center.get(nid)
    assert entry.kind == "error"
    assert entry.duration_sec == 5.0


def test_eviction_keeps_loading_entries():
    center = NotificationCenter(max_entries=2)
    loading = center.loading("still going")
    center.success("one")
    center.success("two")
    assert len(center) == 2
    assert center.get(loading) is not None


def test_dismiss_and_recent():
    center = NotificationCenter()
    first = center.success("first")
    center.success("second")
    assert center.dismiss(first) is True
    assert center.dismiss(first) is False
    assert [n.message for n in center.recent()] == ["second"]
    assert center.recent(limit=0) == []


def test_invalid_capacity_raises():
    with pytest.raises(ValueError, match="max_entries"):
        NotificationCenter(max_entries=0)
