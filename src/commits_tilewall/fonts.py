from __future__ import annotations

import subprocess
from pathlib import Path

from PIL import ImageFont

from .errors import FontUnavailableError

FONT_PATTERNS = ("sans:bold", "sans")
AnyFont = ImageFont.FreeTypeFont | ImageFont.ImageFont


def _fc_match(pattern: str) -> str:
    try:
        proc = subprocess.run(
            ["fc-match", "--format=%{file}", pattern],
            capture_output=True,
            text=True,
            timeout=30,
        )
    except (OSError, subprocess.TimeoutExpired):
        return ""
    if proc.returncode != 0:
        return ""
    return proc.stdout.strip()


def find_system_font(patterns: tuple[str, ...] = FONT_PATTERNS) -> Path:
    """Ask fontconfig for a sans font file, bold first."""
    for pattern in patterns:
        found = _fc_match(pattern)
        if found and Path(found).is_file():
            return Path(found)
    raise FontUnavailableError(
        f"No system font found via fontconfig (tried {', '.join(repr(p) for p in patterns)}); "
        "install a sans font or pass --font PATH"
    )


def load_font(path: Path | str | None = None, size: int = 12) -> ImageFont.FreeTypeFont:
    font_path = Path(path) if path is not None else find_system_font()
    if not font_path.is_file():
        raise FontUnavailableError(f"Font file not found: {font_path}")
    try:
        return ImageFont.truetype(str(font_path), size=size)
    except OSError as e:
        raise FontUnavailableError(f"Could not load font {font_path}: {e}") from e
