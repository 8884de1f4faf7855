from __future__ import annotations

import datetime as dt

import pytest

from commits_tilewall.layout import (
    compute_layout,
    default_range,
    month_label_columns,
    saturday_on_or_after,
    sunday_on_or_before,
    year_label_columns,
)

D = dt.date


def test_week_edges() -> None:
    # 2024-01-05 is a Friday.
    assert sunday_on_or_before(D(2024, 1, 5)) == D(2023, 12, 31)
    assert saturday_on_or_after(D(2024, 1, 5)) == D(2024, 1, 6)
    assert sunday_on_or_before(D(2023, 12, 31)) == D(2023, 12, 31)
    assert saturday_on_or_after(D(2024, 1, 6)) == D(2024, 1, 6)


def test_partial_weeks_count_as_full_columns() -> None:
    layout = compute_layout(D(2024, 1, 5), D(2024, 1, 6))
    assert layout.columns == 1
    assert layout.rows == 7

    # Saturday -> Sunday spans two weeks.
    layout = compute_layout(D(2024, 1, 6), D(2024, 1, 7))
    assert layout.columns == 2

    layout = compute_layout(D(2024, 1, 1), D(2024, 12, 31))
    assert layout.start == D(2023, 12, 31)
    assert layout.end == D(2025, 1, 4)
    assert layout.columns == 53


def test_position_and_cell_origin() -> None:
    layout = compute_layout(D(2024, 1, 5), D(2024, 1, 20), cell=10, gap=2)
    assert layout.position(D(2023, 12, 31)) == (0, 0)
    assert layout.position(D(2024, 1, 5)) == (0, 5)
    assert layout.position(D(2024, 1, 7)) == (1, 0)
    x0, y0 = layout.cell_origin(D(2023, 12, 31))
    x1, y1 = layout.cell_origin(D(2024, 1, 8))
    assert (x1 - x0, y1 - y0) == (12, 12)
    with pytest.raises(ValueError):
        layout.position(D(2023, 12, 30))


def test_image_size_fits_grid_and_content() -> None:
    layout = compute_layout(D(2024, 1, 1), D(2024, 12, 31), cell=10, gap=2)
    assert layout.width >= layout.grid_left + layout.grid_width + layout.margin
    assert layout.height >= layout.grid_bottom + layout.footer_height
    wide = compute_layout(D(2024, 1, 5), D(2024, 1, 6), cell=10, gap=2, min_content_width=500)
    assert wide.width == wide.margin * 2 + wide.gutter + 500


def test_iter_days_covers_every_cell() -> None:
    layout = compute_layout(D(2024, 2, 1), D(2024, 3, 31))
    days = list(layout.iter_days())
    assert len(days) == layout.columns * 7
    assert days[0] == layout.start and days[-1] == layout.end


def test_invalid_range() -> None:
    with pytest.raises(ValueError):
        compute_layout(D(2024, 2, 1), D(2024, 1, 1))


def test_month_labels_on_first_column_of_each_month() -> None:
    layout = compute_layout(D(2024, 1, 5), D(2024, 3, 10))
    labels = month_label_columns(layout)
    assert [(col, day.month) for col, day in labels] == [(0, 1), (5, 2), (9, 3)]
    # Column 4 starts Sunday 2024-01-28 and contains Feb 1, but its first day is in January.
    assert layout.column_start(4) == D(2024, 1, 28)


def test_year_labels() -> None:
    layout = compute_layout(D(2023, 11, 15), D(2024, 2, 1))
    # Column 7 starts on Sunday 2023-12-31, so 2024 first opens column 8.
    assert year_label_columns(layout) == [(0, 2023), (8, 2024)]


def test_default_range() -> None:
    first, last = default_range(today=D(2024, 6, 30))
    assert last == D(2024, 6, 30)
    assert compute_layout(first, last).columns == 53
    assert default_range(today=D(2024, 6, 30), since=D(2024, 1, 1)) == (D(2024, 1, 1), D(2024, 6, 30))


def test_explicit_gutter_moves_the_grid() -> None:
    default = compute_layout(D(2024, 1, 1), D(2024, 1, 31), cell=10, gap=2)
    wide = compute_layout(D(2024, 1, 1), D(2024, 1, 31), cell=10, gap=2, gutter=40)
    assert default.gutter == 30
    assert wide.gutter == 40
    assert wide.grid_left == wide.margin + 40
    assert wide.width == default.width + 10
