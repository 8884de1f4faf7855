from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import ImageFont

FAKE_GIT = """#!/usr/bin/env python3
import os
import sys
from pathlib import Path


def main() -> int:
    state = Path.cwd() / ".fakegit"
    if not state.is_dir():
        sys.stderr.write("fatal: not a git repository (or any of the parent directories): .git\\n")
        return 128
    args = sys.argv[1:]
    if args[:2] == ["rev-parse", "--show-toplevel"]:
        raw = state / "toplevel.bin"
        if raw.exists():
            sys.stdout.buffer.write(raw.read_bytes())
        else:
            sys.stdout.write(str(Path.cwd()) + "\\n")
        return 0
    if args and args[0] == "log":
        (state / "last_args.txt").write_text("\\n".join(args), encoding="utf-8")
        log = state / "log.txt"
        if log.exists():
            sys.stdout.write(log.read_text(encoding="utf-8"))
            sys.stdout.flush()
        stderr = state / "stderr.txt"
        if stderr.exists():
            sys.stderr.write(stderr.read_text(encoding="utf-8"))
        code = state / "exit.txt"
        return int(code.read_text(encoding="utf-8")) if code.exists() else 0
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
"""


def commit_lines(name: str, email: str, iso: str, numstat: list[tuple[str, str, str]] | None = None) -> str:
    lines = [f"@@@{name}\t{email}\t{iso}"]
    for added, deleted, path in numstat or []:
        lines.append(f"{added}\t{deleted}\t{path}")
    return "\n".join(lines) + "\n\n"


@pytest.fixture
def fake_git(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    script = bin_dir / "git"
    script.write_text(FAKE_GIT, encoding="utf-8")
    script.chmod(0o755)
    monkeypatch.setenv("PATH", str(bin_dir) + os.pathsep + os.environ.get("PATH", ""))
    return bin_dir


@pytest.fixture
def make_repo(tmp_path: Path, fake_git: Path) -> Callable[..., Path]:
    def _make(
        name: str,
        log: str = "",
        exit_code: int = 0,
        stderr: str = "",
        toplevel: bytes | None = None,
    ) -> Path:
        repo = tmp_path / name
        state = repo / ".fakegit"
        state.mkdir(parents=True)
        (state / "log.txt").write_text(log, encoding="utf-8")
        if exit_code:
            (state / "exit.txt").write_text(str(exit_code), encoding="utf-8")
        if stderr:
            (state / "stderr.txt").write_text(stderr, encoding="utf-8")
        if toplevel is not None:
            (state / "toplevel.bin").write_bytes(toplevel)
        return repo

    return _make


@pytest.fixture
def default_font() -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    return ImageFont.load_default()
