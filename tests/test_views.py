import pytest

from tui.views import VIEW_ORDER, ViewId, ViewState, next_view, view_for_number


def test_tab_cycles_through_all_views():
    seen = [ViewId.DASHBOARD]
    for _ in range(len(VIEW_ORDER)):
        seen.append(next_view(seen[-1]))

    assert seen[:-1] == VIEW_ORDER
    assert seen[-1] == ViewId.DASHBOARD


def test_number_keys_map_to_views():
    assert view_for_number(1) == ViewId.DASHBOARD
    assert view_for_number(4) == ViewId.FOCUS
    with pytest.raises(IndexError):
        view_for_number(0)
    with pytest.raises(IndexError):
        view_for_number(5)


def test_selection_is_clamped():
    state = ViewState()
    assert state.move(-1, 3) == 0
    assert state.move(1, 3) == 1
    assert state.move(5, 3) == 2
    assert state.move(0, 1) == 0


def test_selection_resets_on_empty_list():
    state = ViewState(selected_index=4)
    assert state.move(1, 0) == 0


def test_every_view_has_a_title():
    assert all(view.title for view in ViewId)
