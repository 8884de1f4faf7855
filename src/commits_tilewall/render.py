from __future__ import annotations

import dataclasses
import datetime as dt
import re
from collections.abc import Mapping
from pathlib import Path

from PIL import Image, ImageDraw

from .errors import OutputWriteError
from .fonts import AnyFont
from .layout import DEFAULT_CELL, DEFAULT_GAP, GridLayout, compute_layout, month_label_columns, year_label_columns
from .models import ChangeTotals
from .themes import Theme, bucket_day_counts, bucket_label, color_for_count

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
WEEKDAY_LABELS = {1: "Mon", 3: "Wed", 5: "Fri"}  # row -> label; row 0 is Sunday


@dataclasses.dataclass(frozen=True)
class RenderOptions:
    theme: Theme
    font: AnyFont
    cell: int = DEFAULT_CELL
    gap: int = DEFAULT_GAP


def font_size_for_cell(cell: int) -> int:
    return max(8, round(cell * 1.2))


def fmt_int(n: int) -> str:
    return f"{int(n):,}"


def text_width(font: AnyFont, text: str) -> int:
    left, _top, right, _bottom = font.getbbox(text)
    return int(right - left)


def text_height(font: AnyFont, text: str) -> int:
    _left, top, _right, bottom = font.getbbox(text)
    return int(bottom - top)


def summary_line(author: str, totals: ChangeTotals) -> str:
    parts = [
        f"{fmt_int(totals.commits)} commits total",
        f"{fmt_int(totals.files_changed)} files changed",
        f"{fmt_int(totals.insertions)} insertions(+)",
        f"{fmt_int(totals.deletions)} deletions(-)",
    ]
    line = ", ".join(parts)
    return f"{author}: {line}" if author else line


def legend_text(bucket: int, day_count: int) -> str:
    """'2-4 (17d)': the bucket's range and how many days fell into it."""
    return f"{bucket_label(bucket)} ({fmt_int(day_count)}d)"


def legend_texts(days: Mapping[dt.date, int], first_day: dt.date, last_day: dt.date) -> list[str]:
    return [legend_text(b, n) for b, n in enumerate(bucket_day_counts(days, first_day, last_day))]


def _legend_width(font: AnyFont, texts: list[str], cell: int, gap: int) -> int:
    return sum(cell + gap * 2 + text_width(font, text) + cell for text in texts)


def weekday_gutter(font: AnyFont, cell: int) -> int:
    return max(text_width(font, text) for text in WEEKDAY_LABELS.values()) + cell


def place_labels(candidates: list[tuple[int, str]], font: AnyFont, label_gap: int) -> list[tuple[int, str]]:
    """
    Drop labels that would overlap the label before them.

    The first candidate sits on the grid's leading, usually partial, column.
    When the next boundary label collides with it, the edge label gives way,
    so a range starting on Dec 28 shows the new year and January instead of
    a two-column "Dec".
    """
    placed: list[tuple[int, str]] = []
    for i, (x, text) in enumerate(candidates):
        if placed:
            prev_x, prev_text = placed[-1]
            if x < prev_x + text_width(font, prev_text) + label_gap:
                if i == 1:
                    placed[-1] = (x, text)
                continue
        placed.append((x, text))
    return placed


def header_labels(
    layout: GridLayout,
    font: AnyFont,
    label_gap: int,
) -> tuple[list[tuple[int, str]], list[tuple[int, str]]]:
    """(year labels, month labels) as (x, text), after overlap removal."""
    years = [(layout.column_x(col), str(year)) for col, year in year_label_columns(layout)]
    months = [(layout.column_x(col), MONTH_ABBR[day.month - 1]) for col, day in month_label_columns(layout)]
    return place_labels(years, font, label_gap), place_labels(months, font, label_gap)


def _draw_text_in_band(
    draw: ImageDraw.ImageDraw,
    x: int,
    band_top: int,
    band_height: int,
    text: str,
    font: AnyFont,
    fill: tuple[int, int, int],
) -> None:
    # Vertically center the glyph box inside the band; getbbox includes the ascender offset.
    _left, top, _right, bottom = font.getbbox(text)
    y = band_top + (band_height - (bottom - top)) // 2 - top
    draw.text((x, y), text, font=font, fill=fill)


def _draw_header(draw: ImageDraw.ImageDraw, layout: GridLayout, options: RenderOptions) -> None:
    theme, font = options.theme, options.font
    years, months = header_labels(layout, font, options.cell // 2)

    year_top = layout.margin
    for x, text in years:
        _draw_text_in_band(draw, x, year_top, layout.label_height, text, font, theme.text_primary)

    month_top = layout.margin + layout.label_height
    for x, text in months:
        _draw_text_in_band(draw, x, month_top, layout.label_height, text, font, theme.text_secondary)


def _draw_weekdays(draw: ImageDraw.ImageDraw, layout: GridLayout, options: RenderOptions) -> None:
    for row, text in WEEKDAY_LABELS.items():
        _draw_text_in_band(
            draw,
            layout.margin,
            layout.row_y(row),
            layout.cell,
            text,
            options.font,
            options.theme.text_secondary,
        )


def _draw_cells(draw: ImageDraw.ImageDraw, layout: GridLayout, days: Mapping[dt.date, int], theme: Theme) -> None:
    size = layout.cell
    for day in layout.iter_days():
        count = days.get(day, 0) if layout.in_range(day) else 0
        x, y = layout.cell_origin(day)
        draw.rectangle([x, y, x + size - 1, y + size - 1], fill=color_for_count(count, theme))


def _draw_footer(
    draw: ImageDraw.ImageDraw,
    layout: GridLayout,
    options: RenderOptions,
    legend: list[str],
    summary: str,
) -> None:
    theme, font, cell, gap = options.theme, options.font, options.cell, options.gap

    sep_y = layout.grid_bottom + cell
    draw.line([(layout.margin, sep_y), (layout.width - layout.margin - 1, sep_y)], fill=theme.separator)

    legend_top = sep_y + gap + cell // 2
    x = layout.grid_left
    for color, text in zip(theme.ramp, legend):
        draw.rectangle([x, legend_top, x + cell - 1, legend_top + cell - 1], fill=color)
        x += cell + gap * 2
        _draw_text_in_band(draw, x, legend_top, cell, text, font, theme.text_secondary)
        x += text_width(font, text) + cell

    summary_top = legend_top + cell + gap
    _draw_text_in_band(draw, layout.grid_left, summary_top, layout.label_height, summary, font, theme.text_primary)


def tilewall_layout(
    days: Mapping[dt.date, int],
    first_day: dt.date,
    last_day: dt.date,
    options: RenderOptions,
    author: str = "",
    totals: ChangeTotals | None = None,
) -> GridLayout:
    """The layout render_tilewall uses: sized for the weekday labels, legend and summary."""
    if totals is None:
        totals = ChangeTotals(commits=sum(days.values()))
    font, cell, gap = options.font, options.cell, options.gap
    content_width = max(
        _legend_width(font, legend_texts(days, first_day, last_day), cell, gap),
        text_width(font, summary_line(author, totals)),
    )
    return compute_layout(
        first_day,
        last_day,
        cell=cell,
        gap=gap,
        gutter=weekday_gutter(font, cell),
        min_content_width=content_width,
    )


def render_tilewall(
    days: Mapping[dt.date, int],
    first_day: dt.date,
    last_day: dt.date,
    options: RenderOptions,
    author: str = "",
    totals: ChangeTotals | None = None,
) -> Image.Image:
    """
    Draw the calendar grid for `first_day`..`last_day`.

    One column per week (Sunday on top), one cell per day colored by its
    commit bucket. Days outside the range or without commits use the theme's
    empty color. Year and month labels go above the grid, the bucket legend
    with per-bucket day counts and a totals line below it.
    """
    if totals is None:
        totals = ChangeTotals(commits=sum(days.values()))
    layout = tilewall_layout(days, first_day, last_day, options, author=author, totals=totals)

    image = Image.new("RGB", (layout.width, layout.height), options.theme.background)
    draw = ImageDraw.Draw(image)
    _draw_header(draw, layout, options)
    _draw_weekdays(draw, layout, options)
    _draw_cells(draw, layout, days, options.theme)
    _draw_footer(
        draw,
        layout,
        options,
        legend_texts(days, first_day, last_day),
        summary_line(author, totals),
    )
    return image


def output_filename(author: str) -> str:
    slug = re.sub(r"\s+", "_", (author or "").strip())
    slug = re.sub(r"[^A-Za-z0-9._@+-]", "_", slug).strip(".")
    return f"commit_image_{slug or 'unknown'}.png"


def save_image(image: Image.Image, path: Path) -> Path:
    try:
        image.save(path, format="PNG")
    except OSError as e:
        raise OutputWriteError(path, e) from e
    return path
