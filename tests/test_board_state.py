"""Tests for LocalBoardState: optimistic apply, confirm and rollback."""

from boardsync.services.board_state import (
    BoardSnapshot,
    CardView,
    ColumnView,
    LocalBoardState,
    TagView,
)


def _state():
    state = LocalBoardState("b1")
    state.replace(BoardSnapshot(
        board_id="b1",
        columns=(
            ColumnView(id="c1", board_id="b1", name="To Do", position=0),
            ColumnView(id="c2", board_id="b1", name="Done", position=1),
        ),
        cards={
            "c1": (
                CardView(id="A", column_id="c1", title="Alpha", position=0),
                CardView(id="B", column_id="c1", title="Beta", position=1),
            ),
            "c2": (),
        },
        tags=(TagView(id="t1", board_id="b1", name="Bug"),),
    ))
    return state


class TestOptimisticTransitions:

    def test_apply_swaps_columns_together(self):
        state = _state()
        moved = CardView(id="A", column_id="c2", title="Alpha", position=0)
        state.apply({
            "c1": [CardView(id="B", column_id="c1", title="Beta", position=0)],
            "c2": [moved],
        })
        assert [c.id for c in state.cards_in("c1")] == ["B"]
        assert [c.id for c in state.cards_in("c2")] == ["A"]

    def test_rollback_restores_previous_snapshot(self):
        state = _state()
        before = state.snapshot()
        checkpoint = state.apply({"c1": []})
        state.rollback(checkpoint)
        assert state.snapshot() is before

    def test_rollback_after_confirm_is_a_no_op(self):
        state = _state()
        checkpoint = state.apply({"c1": []})
        state.confirm(checkpoint)
        state.rollback(checkpoint)
        assert state.cards_in("c1") == ()

    def test_snapshot_handed_out_is_not_changed_by_later_apply(self):
        state = _state()
        before = state.snapshot()
        state.apply({"c1": []})
        assert len(before.cards_in("c1")) == 2


class TestSingleCardHelpers:

    def test_upsert_moves_card_between_columns(self):
        state = _state()
        state.upsert_card(CardView(id="A", column_id="c2", title="Alpha", position=0))
        assert [c.id for c in state.cards_in("c1")] == ["B"]
        assert [c.id for c in state.cards_in("c2")] == ["A"]

    def test_remove_card_returns_removed(self):
        state = _state()
        removed = state.remove_card("B")
        assert removed.title == "Beta"
        assert state.find_card("B") is None

    def test_remove_unknown_card_returns_none(self):
        assert _state().remove_card("nope") is None

    def test_lookups_are_case_insensitive(self):
        state = _state()
        assert state.find_card_by_title("  alpha ").id == "A"
        assert state.find_column_by_name("done").id == "c2"

    def test_add_tag_keeps_name_order(self):
        state = _state()
        state.add_tag(TagView(id="t0", board_id="b1", name="Aardvark"))
        assert [t.name for t in state.snapshot().tags] == ["Aardvark", "Bug"]
        assert [t.id for t in state.tags_by_id({"t1"})] == ["t1"]
