"""Tests for the selection set."""

import pytest

from vector_results.selection.selection_set import SelectionSet


@pytest.fixture
def selection():
    selection = SelectionSet()
    selection.retain(["e1", "e2", "e3", "e4", "e5"])
    selection.enter()
    return selection


class TestSelectionSet:
    """Tests for selection operations."""

    def test_toggle_flips_membership(self, selection):
        assert selection.toggle("e1") is True
        assert selection.is_selected("e1")

        assert selection.toggle("e1") is False
        assert not selection.is_selected("e1")

    def test_toggle_unknown_element_ignored(self, selection):
        assert selection.toggle("zzz") is False
        assert selection.count == 0

    def test_select_all_uses_visible_elements(self, selection):
        selection.select_all(["e2", "e4"])

        assert selection.selected == frozenset({"e2", "e4"})

    def test_deselect_all_keeps_mode(self, selection):
        selection.select_all(["e1", "e2"])

        selection.deselect_all()

        assert selection.count == 0
        assert selection.active is True

    def test_exit_clears_and_leaves_mode(self, selection):
        selection.toggle("e3")

        selection.exit()

        assert selection.count == 0
        assert selection.active is False

    def test_retain_prunes_missing_elements(self, selection):
        selection.select_all(["e1", "e2", "e3"])

        selection.retain(["e2", "e3", "e9"])

        assert selection.selected == frozenset({"e2", "e3"})

    def test_reset_forgets_everything(self, selection):
        selection.toggle("e1")

        selection.reset()

        assert selection.count == 0
        assert selection.active is False
        assert selection.toggle("e1") is False

    def test_take_for_bulk_delete_in_result_order(self, selection):
        selection.toggle("e4")
        selection.toggle("e1")

        assert selection.take_for_bulk_delete() == ["e1", "e4"]
        assert selection.count == 0
