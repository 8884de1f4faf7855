from __future__ import annotations

import datetime as dt
import subprocess
import threading
from collections.abc import Iterable, Iterator
from pathlib import Path

from .errors import RepositoryAccessError
from .models import CommitRecord

COMMIT_MARKER = "@@@"
LOG_PRETTY = f"{COMMIT_MARKER}%an%x09%ae%x09%cI"
MAX_STDERR_CHARS = 50_000
# git reads --since in this machine's timezone while days are counted in the
# committer's; offsets span -12:00..+14:00, so start git's scan early enough to
# cover any pairing and filter exactly on the committer day afterwards.
SINCE_SLACK = dt.timedelta(days=3)


def run_git(args: list[str], cwd: Path, timeout_s: int = 300) -> tuple[int, str, str]:
    proc = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        timeout=timeout_s,
    )
    return proc.returncode, proc.stdout, proc.stderr


def check_repository(path: Path | str, timeout_s: int = 60) -> Path:
    """Resolve `path` to its work tree root or raise RepositoryAccessError."""
    candidate = Path(path).expanduser()
    if not candidate.exists():
        raise RepositoryAccessError(path, "no such file or directory")
    if not candidate.is_dir():
        raise RepositoryAccessError(path, "not a directory")
    try:
        code, out, err = run_git(["rev-parse", "--show-toplevel"], cwd=candidate, timeout_s=timeout_s)
    except FileNotFoundError as e:
        raise RepositoryAccessError(path, f"git executable not found ({e})") from e
    except PermissionError as e:
        raise RepositoryAccessError(path, f"permission denied ({e})") from e
    except subprocess.TimeoutExpired as e:
        raise RepositoryAccessError(path, f"git rev-parse timed out after {timeout_s}s") from e
    except OSError as e:
        raise RepositoryAccessError(path, f"failed to run git: {e}") from e
    if code != 0:
        reason = err.strip().splitlines()[0] if err.strip() else f"git rev-parse exited {code}"
        raise RepositoryAccessError(path, reason)
    top = Path(out.strip()) if out.strip() else None
    # An undecodable top-level path comes back with replacement characters; keep the given path then.
    if top is None or not top.is_dir():
        return candidate.resolve()
    return top.resolve()


def git_log_command(since: dt.date | None = None, include_merges: bool = True) -> list[str]:
    cmd = [
        "git",
        "log",
        "--date=iso-strict",
        f"--pretty=format:{LOG_PRETTY}",
        "--numstat",
    ]
    if not include_merges:
        cmd.insert(2, "--no-merges")
    if since is not None:
        cmd.append(f"--since={(since - SINCE_SLACK).isoformat()}T00:00:00")
    return cmd


def committer_local_day(iso: str) -> dt.date | None:
    # The date part of %cI is already in the committer's own offset.
    s = (iso or "").strip()
    try:
        return dt.date.fromisoformat(s[:10])
    except ValueError:
        return None


def parse_log_stream(lines: Iterable[str]) -> Iterator[CommitRecord]:
    """Parse `git log --numstat` output produced with LOG_PRETTY."""
    header: tuple[dt.date, str, str] | None = None
    insertions = 0
    deletions = 0
    files = 0

    def flush() -> CommitRecord | None:
        if header is None:
            return None
        day, name, email = header
        return CommitRecord(
            day=day,
            author_name=name,
            author_email=email,
            insertions=insertions,
            deletions=deletions,
            files_changed=files,
        )

    for raw_line in lines:
        line = raw_line.rstrip("\n")
        if not line:
            continue
        if line.startswith(COMMIT_MARKER):
            rec = flush()
            if rec is not None:
                yield rec
            parts = line[len(COMMIT_MARKER) :].split("\t", 2)
            insertions = deletions = files = 0
            day = committer_local_day(parts[2]) if len(parts) == 3 else None
            # Malformed headers drop the commit along with its numstat lines.
            header = (day, parts[0], parts[1]) if day is not None else None
            continue

        if header is None:
            continue
        parts = line.split("\t", 2)
        if len(parts) < 3:
            continue
        added_s, deleted_s = parts[0], parts[1]
        if added_s == "-" or deleted_s == "-":
            files += 1
            continue
        try:
            added = int(added_s)
            deleted = int(deleted_s)
        except ValueError:
            continue
        insertions += added
        deletions += deleted
        files += 1

    rec = flush()
    if rec is not None:
        yield rec


def _is_empty_history(stderr: str) -> bool:
    s = stderr.lower()
    return "does not have any commits yet" in s or "bad default revision 'head'" in s


def iter_commits(
    repo: Path,
    since: dt.date | None = None,
    include_merges: bool = True,
) -> Iterator[CommitRecord]:
    cmd = git_log_command(since=since, include_merges=include_merges)
    try:
        proc = subprocess.Popen(
            cmd,
            cwd=str(repo),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as e:
        raise RepositoryAccessError(repo, f"failed to start git log: {e}") from e

    stderr_chunks: list[str] = []
    stderr_chars = 0

    def drain_stderr() -> None:
        nonlocal stderr_chars
        if proc.stderr is None:
            return
        while True:
            chunk = proc.stderr.read(8192)
            if not chunk:
                return
            if stderr_chars >= MAX_STDERR_CHARS:
                continue
            take = chunk[: MAX_STDERR_CHARS - stderr_chars]
            stderr_chunks.append(take)
            stderr_chars += len(take)

    stderr_thread = threading.Thread(target=drain_stderr, daemon=True)
    stderr_thread.start()

    assert proc.stdout is not None
    try:
        for rec in parse_log_stream(proc.stdout):
            if since is not None and rec.day < since:
                continue
            yield rec
    finally:
        # Also unblocks git when the consumer stops early.
        proc.stdout.close()
        code = proc.wait()
        stderr_thread.join()

    stderr = "".join(stderr_chunks)
    if code != 0 and not _is_empty_history(stderr):
        msg = stderr.strip()[:500] or "no output"
        raise RepositoryAccessError(repo, f"git log exited {code}: {msg}")
