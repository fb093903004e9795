"""
Unit tests for grouping archived events by kind.
"""

from nostr_restore.archive_store import ArchivedEvent
from nostr_restore.routes import group_by_kind


def make_events(kinds):
    return [
        ArchivedEvent(id=f"e{i}", pubkey="a" * 64, created_at=1000 - i, kind=kind, event_data="{}")
        for i, kind in enumerate(kinds)
    ]


class TestGroupByKind:
    def test_empty(self):
        assert group_by_kind([]) == []

    def test_consecutive_kinds(self):
        """Kinds [0, 1, 1] form two groups in input order."""
        groups = group_by_kind(make_events([0, 1, 1]))

        assert [g.kind for g in groups] == [0, 1]
        assert [e.id for e in groups[0].events] == ["e0"]
        assert [e.id for e in groups[1].events] == ["e1", "e2"]

    def test_new_group_on_every_change(self):
        """A kind that reappears after another starts a new group."""
        groups = group_by_kind(make_events([1, 3, 1]))
        assert [g.kind for g in groups] == [1, 3, 1]

    def test_preserves_total(self):
        events = make_events([0, 0, 3, 7, 7, 7, 10002])
        groups = group_by_kind(events)
        assert sum(len(g.events) for g in groups) == len(events)
        assert [e for g in groups for e in g.events] == events
