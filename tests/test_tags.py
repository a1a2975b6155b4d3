"""Tests for tags: creation rules and card-tag reconciliation."""

from unittest.mock import MagicMock, patch

import pytest

from boardsync.errors import PersistenceError, ValidationError
from boardsync.services import column_service, tag_service
from boardsync.services.board_service import BoardSession
from boardsync.services.board_store import BoardStore


# ─── Reconcile (store mocked) ──────────────────────────────

class TestReconcile:

    def test_replace_all_writes_desired_set(self):
        store = MagicMock()
        delta = tag_service.reconcile(store, "card-1", {"t1", "t2"}, {"t2", "t3"})

        store.delete_card_tags.assert_called_once_with("card-1")
        store.insert_card_tags.assert_called_once_with("card-1", frozenset({"t2", "t3"}))
        assert delta.added == {"t3"}
        assert delta.removed == {"t1"}

    def test_no_existing_tags_skips_delete(self):
        store = MagicMock()
        tag_service.reconcile(store, "card-1", set(), {"t1"})
        store.delete_card_tags.assert_not_called()

    def test_same_set_reports_no_change(self):
        store = MagicMock()
        delta = tag_service.reconcile(store, "card-1", {"t1"}, {"t1"})
        assert not delta.changed

    def test_diff(self):
        delta = tag_service.diff(["a", "b"], ["b", "c"])
        assert (delta.added, delta.removed) == (frozenset({"c"}), frozenset({"a"}))


# ─── Tag creation ──────────────────────────────────────────

class TestCreateTag:

    def test_create_tag_adds_to_board(self, session, board):
        tag = session.create_tag("Bug", "#ef4444")
        assert tag.name == "Bug"
        assert [t.name for t in session.snapshot().tags] == ["Bug"]

    @pytest.mark.parametrize("name", ["", "   ", "x" * 51, None])
    def test_invalid_names_rejected(self, session, name):
        with pytest.raises(ValidationError):
            session.create_tag(name)

    def test_fifty_char_name_allowed(self, session):
        assert session.create_tag("x" * 50).name == "x" * 50

    def test_invalid_color_rejected(self, session):
        with pytest.raises(ValidationError):
            session.create_tag("Bug", "#12345")

    def test_short_hex_color_allowed(self, session):
        assert session.create_tag("Bug", "#f00").color == "#f00"


# ─── Tags on cards ─────────────────────────────────────────

class TestCardTags:

    def test_update_replaces_tag_set(self, session, board):
        t1 = session.create_tag("One")
        t2 = session.create_tag("Two")
        t3 = session.create_tag("Three")
        card = session.add_card(board["todo_id"], "A", tag_ids=[t1.id, t2.id]).card

        session.update_card(card.id, "A", tag_ids=[t2.id, t3.id])

        assert session.store.card_tag_ids(card.id) == {t2.id, t3.id}
        assert session.state.find_card(card.id).tag_ids == {t2.id, t3.id}

    def test_reconcile_is_idempotent(self, session, board):
        t1 = session.create_tag("One")
        card = session.add_card(board["todo_id"], "A", tag_ids=[t1.id]).card
        session.update_card(card.id, "A", tag_ids=[t1.id])
        session.update_card(card.id, "A", tag_ids=[t1.id])
        assert session.store.card_tag_ids(card.id) == {t1.id}

    def test_clearing_tags_issues_no_insert(self, session, board):
        t1 = session.create_tag("One")
        card = session.add_card(board["todo_id"], "A", tag_ids=[t1.id]).card
        with patch.object(BoardStore, "insert_card_tags", wraps=session.store.insert_card_tags) as insert:
            session.update_card(card.id, "A", tag_ids=[])
        insert.assert_called_once_with(card.id, frozenset())
        assert session.store.card_tag_ids(card.id) == set()

    def test_empty_insert_is_not_a_write(self):
        with patch.object(BoardStore, "_write") as write:
            BoardStore().insert_card_tags("card-1", [])
        write.assert_not_called()

    def test_tags_omitted_leaves_tags_alone(self, session, board):
        t1 = session.create_tag("One")
        card = session.add_card(board["todo_id"], "A", tag_ids=[t1.id]).card
        session.update_card(card.id, "A2")
        assert session.store.card_tag_ids(card.id) == {t1.id}

    def test_tag_failure_is_partial(self, session, board):
        t1 = session.create_tag("One")
        card = session.add_card(board["todo_id"], "A").card
        with patch.object(
            BoardStore, "insert_card_tags", side_effect=PersistenceError("down")
        ):
            result = session.update_card(card.id, "A2", tag_ids=[t1.id])

        assert not result.complete
        assert result.partial_failures[0].step == "tags"
        # the scalar write stands; the card keeps its old (empty) tag set
        assert session.state.find_card(card.id).title == "A2"
        assert session.state.find_card(card.id).tags == ()

    def test_tag_failure_on_create_keeps_card(self, session, board):
        t1 = session.create_tag("One")
        with patch.object(
            BoardStore, "insert_card_tags", side_effect=PersistenceError("down")
        ):
            result = session.add_card(board["todo_id"], "A", tag_ids=[t1.id])
        assert not result.complete
        assert [c.title for c in session.snapshot().cards_in(board["todo_id"])] == ["A"]

    def test_failed_insert_after_delete_matches_store(self, session, board):
        t1 = session.create_tag("One")
        t2 = session.create_tag("Two")
        card = session.add_card(board["todo_id"], "A", tag_ids=[t1.id]).card
        with patch.object(
            BoardStore, "insert_card_tags", side_effect=PersistenceError("down")
        ):
            result = session.update_card(card.id, "A", tag_ids=[t2.id])

        assert not result.complete
        # the old associations were deleted before the insert failed
        assert session.store.card_tag_ids(card.id) == set()
        assert session.state.find_card(card.id).tag_ids == frozenset()
        assert result.card.tags == ()


# ─── Board scoping ─────────────────────────────────────────

class TestForeignTags:

    def _foreign_tag(self):
        other = column_service.create_board("Other", ["X"])
        other_session = BoardSession(other.id)
        other_session.load()
        return other_session.create_tag("Foreign")

    def test_add_card_rejects_other_boards_tag(self, session, board):
        foreign = self._foreign_tag()
        with patch.object(BoardStore, "insert_card") as insert:
            with pytest.raises(ValidationError):
                session.add_card(board["todo_id"], "A", tag_ids=[foreign.id])
        insert.assert_not_called()

    def test_update_card_rejects_other_boards_tag(self, session, board):
        foreign = self._foreign_tag()
        card = session.add_card(board["todo_id"], "A").card
        with pytest.raises(ValidationError):
            session.update_card(card.id, "A2", tag_ids=[foreign.id])

        assert session.store.card_tag_ids(card.id) == set()
        assert session.store.get_card(card.id).title == "A"

    def test_unknown_tag_id_rejected(self, session, board):
        with pytest.raises(ValidationError):
            session.add_card(board["todo_id"], "A", tag_ids=["no-such-tag"])
