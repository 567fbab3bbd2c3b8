from __future__ import annotations

import pytest

from ols_diagnostics.diagnostics.selection import ViewSelection, grid_rows, panel_position


def test_selection_is_clipped_deduplicated_and_sorted() -> None:
    assert ViewSelection.from_values({0, 3, 7, 2}).views == (2, 3)
    assert ViewSelection.from_values([6, 1, 6, 1, -4]).views == (1, 6)


def test_selection_defaults_to_r_default_views() -> None:
    assert ViewSelection.from_values(None).views == (1, 2, 3, 5)
    assert ViewSelection().views == (1, 2, 3, 5)


def test_selection_accepts_ranges_and_single_ints() -> None:
    assert ViewSelection.from_values(range(1, 7)).views == (1, 2, 3, 4, 5, 6)
    assert ViewSelection.from_values(4).views == (4,)


def test_selection_drops_non_integral_values() -> None:
    assert ViewSelection.from_values([2.0, 2.5, 3]).views == (2, 3)


def test_panel_position_fills_two_columns_row_by_row() -> None:
    assert [panel_position(rank, 5) for rank in range(1, 6)] == [
        (1, 1),
        (1, 2),
        (2, 1),
        (2, 2),
        (3, 1),
    ]


def test_panel_position_rejects_out_of_range_rank() -> None:
    with pytest.raises(ValueError):
        panel_position(0, 3)
    with pytest.raises(ValueError):
        panel_position(4, 3)


def test_grid_rows() -> None:
    assert grid_rows(0) == 1
    assert grid_rows(1) == 1
    assert grid_rows(2) == 1
    assert grid_rows(3) == 2
    assert grid_rows(6) == 3


def test_selection_position_uses_rank_within_selection() -> None:
    selection = ViewSelection.from_values([2, 4, 6])

    assert selection.position(2) == (1, 1)
    assert selection.position(4) == (1, 2)
    assert selection.position(6) == (2, 1)
    assert selection.rows == 2
    assert 4 in selection
    assert 5 not in selection
    with pytest.raises(KeyError):
        selection.position(5)


def test_selection_drops_non_numeric_values() -> None:
    assert ViewSelection.from_values(["two", None, "4", 5]).views == (4, 5)
