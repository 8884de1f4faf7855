from __future__ import annotations

import dataclasses
import datetime as dt
from collections.abc import Iterator

ROWS = 7  # Sunday .. Saturday
DEFAULT_CELL = 10
DEFAULT_GAP = 2


def sunday_on_or_before(day: dt.date) -> dt.date:
    return day - dt.timedelta(days=(day.weekday() + 1) % 7)


def saturday_on_or_after(day: dt.date) -> dt.date:
    return day + dt.timedelta(days=6 - (day.weekday() + 1) % 7)


def default_range(today: dt.date | None = None, since: dt.date | None = None) -> tuple[dt.date, dt.date]:
    """Range used when there is no activity: `since`..today, or the 53 weeks ending today."""
    if today is None:
        today = dt.date.today()
    if since is not None and since <= today:
        return since, today
    return sunday_on_or_before(today) - dt.timedelta(weeks=52), today


@dataclasses.dataclass(frozen=True)
class GridLayout:
    first_day: dt.date
    last_day: dt.date
    start: dt.date  # Sunday of the first column
    end: dt.date  # Saturday of the last column
    columns: int
    cell: int
    gap: int
    margin: int
    gutter: int  # left space for weekday labels
    label_height: int
    header_height: int  # year row + month row
    footer_height: int  # legend + summary
    width: int
    height: int
    rows: int = ROWS

    @property
    def pitch(self) -> int:
        return self.cell + self.gap

    @property
    def grid_left(self) -> int:
        return self.margin + self.gutter

    @property
    def grid_top(self) -> int:
        return self.margin + self.header_height

    @property
    def grid_width(self) -> int:
        return self.columns * self.pitch - self.gap

    @property
    def grid_height(self) -> int:
        return self.rows * self.pitch - self.gap

    @property
    def grid_bottom(self) -> int:
        return self.grid_top + self.grid_height

    def in_range(self, day: dt.date) -> bool:
        return self.first_day <= day <= self.last_day

    def position(self, day: dt.date) -> tuple[int, int]:
        """(column, row) of a day; row 0 is Sunday."""
        offset = (day - self.start).days
        if offset < 0 or day > self.end:
            raise ValueError(f"{day} is outside the grid {self.start}..{self.end}")
        return offset // ROWS, offset % ROWS

    def column_x(self, col: int) -> int:
        return self.grid_left + col * self.pitch

    def row_y(self, row: int) -> int:
        return self.grid_top + row * self.pitch

    def cell_origin(self, day: dt.date) -> tuple[int, int]:
        col, row = self.position(day)
        return self.column_x(col), self.row_y(row)

    def column_start(self, col: int) -> dt.date:
        return self.start + dt.timedelta(weeks=col)

    def iter_days(self) -> Iterator[dt.date]:
        day = self.start
        while day <= self.end:
            yield day
            day += dt.timedelta(days=1)


def compute_layout(
    first_day: dt.date,
    last_day: dt.date,
    cell: int = DEFAULT_CELL,
    gap: int = DEFAULT_GAP,
    gutter: int | None = None,
    min_content_width: int = 0,
) -> GridLayout:
    if last_day < first_day:
        raise ValueError(f"empty date range: {first_day} > {last_day}")
    if cell <= 0 or gap < 0:
        raise ValueError(f"invalid cell/gap: {cell}/{gap}")

    start = sunday_on_or_before(first_day)
    end = saturday_on_or_after(last_day)
    columns = ((end - start).days + 1) // ROWS

    margin = cell
    if gutter is None:
        gutter = cell * 3
    label_height = round(cell * 1.6)
    header_height = label_height * 2
    footer_height = gap + cell * 2 + label_height * 2

    grid_width = columns * (cell + gap) - gap
    width = margin * 2 + gutter + max(grid_width, min_content_width)
    height = margin * 2 + header_height + ROWS * (cell + gap) - gap + footer_height

    return GridLayout(
        first_day=first_day,
        last_day=last_day,
        start=start,
        end=end,
        columns=columns,
        cell=cell,
        gap=gap,
        margin=margin,
        gutter=gutter,
        label_height=label_height,
        header_height=header_height,
        footer_height=footer_height,
        width=width,
        height=height,
    )


def _first_in_range_day(layout: GridLayout, col: int) -> dt.date:
    return max(layout.column_start(col), layout.first_day)


def month_label_columns(layout: GridLayout) -> list[tuple[int, dt.date]]:
    """Columns where a calendar month first appears, with the day that opens it."""
    out: list[tuple[int, dt.date]] = []
    prev: tuple[int, int] | None = None
    for col in range(layout.columns):
        day = _first_in_range_day(layout, col)
        key = (day.year, day.month)
        if key != prev:
            out.append((col, day))
            prev = key
    return out


def year_label_columns(layout: GridLayout) -> list[tuple[int, int]]:
    out: list[tuple[int, int]] = []
    prev: int | None = None
    for col in range(layout.columns):
        year = _first_in_range_day(layout, col).year
        if year != prev:
            out.append((col, year))
            prev = year
    return out
