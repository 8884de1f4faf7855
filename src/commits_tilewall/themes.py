from __future__ import annotations

import dataclasses
import datetime as dt
from collections.abc import Mapping

from .errors import InvalidThemeError

RGB = tuple[int, int, int]

# Lower bound (inclusive) of buckets 1..5; bucket 0 is "no commits".
BUCKET_THRESHOLDS: tuple[int, ...] = (1, 2, 5, 10, 20)


@dataclasses.dataclass(frozen=True)
class Theme:
    name: str
    background: RGB
    text_primary: RGB
    text_secondary: RGB
    separator: RGB
    ramp: tuple[RGB, RGB, RGB, RGB, RGB, RGB]  # [empty, 1, 2-4, 5-9, 10-19, 20+]

    @property
    def empty(self) -> RGB:
        return self.ramp[0]


LIGHT = Theme(
    name="light",
    background=(255, 255, 255),
    text_primary=(50, 50, 50),
    text_secondary=(100, 100, 100),
    separator=(220, 220, 220),
    ramp=(
        (240, 240, 240),
        (140, 240, 140),
        (100, 220, 100),
        (60, 200, 60),
        (40, 180, 40),
        (20, 160, 20),
    ),
)

DARK = Theme(
    name="dark",
    background=(30, 30, 30),
    text_primary=(255, 255, 255),
    text_secondary=(200, 200, 200),
    separator=(70, 70, 70),
    ramp=(
        (50, 50, 50),
        (40, 160, 40),
        (60, 200, 60),
        (80, 240, 80),
        (120, 255, 120),
        (160, 255, 160),
    ),
)

GITHUB = Theme(
    name="github",
    background=(255, 255, 255),
    text_primary=(24, 23, 23),
    text_secondary=(87, 96, 106),
    separator=(235, 237, 240),
    ramp=(
        (235, 237, 240),
        (155, 233, 168),
        (100, 220, 123),
        (64, 196, 99),
        (48, 161, 78),
        (33, 110, 57),
    ),
)

THEMES: dict[str, Theme] = {t.name: t for t in (LIGHT, DARK, GITHUB)}
DEFAULT_THEME = "light"


def theme_names() -> tuple[str, ...]:
    return tuple(THEMES)


def get_theme(name: str) -> Theme:
    key = (name or "").strip().lower()
    try:
        return THEMES[key]
    except KeyError:
        raise InvalidThemeError(name, theme_names()) from None


def bucket_for_count(count: int) -> int:
    if count < 0:
        raise ValueError(f"commit count must be non-negative, got {count}")
    bucket = 0
    for i, lower in enumerate(BUCKET_THRESHOLDS, start=1):
        if count >= lower:
            bucket = i
    return bucket


def color_for_count(count: int, theme: Theme) -> RGB:
    return theme.ramp[bucket_for_count(count)]


def bucket_label(bucket: int) -> str:
    """'0', '1', '2-4', ..., '20+'."""
    if bucket == 0:
        return "0"
    lower = BUCKET_THRESHOLDS[bucket - 1]
    if bucket == len(BUCKET_THRESHOLDS):
        return f"{lower}+"
    upper = BUCKET_THRESHOLDS[bucket] - 1
    if upper == lower:
        return str(lower)
    return f"{lower}-{upper}"


def bucket_day_counts(days: Mapping[dt.date, int], first_day: dt.date, last_day: dt.date) -> list[int]:
    """
    Number of days in `first_day`..`last_day` per bucket.

    Index 0 counts the days without commits, including dates absent from `days`.
    """
    counts = [0] * (len(BUCKET_THRESHOLDS) + 1)
    for day, n in days.items():
        if first_day <= day <= last_day and n > 0:
            counts[bucket_for_count(n)] += 1
    counts[0] = (last_day - first_day).days + 1 - sum(counts[1:])
    return counts
