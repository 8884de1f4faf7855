from __future__ import annotations

import datetime as dt
from collections import defaultdict
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from .errors import RepositoryAccessError
from .git import check_repository, iter_commits
from .identity import AuthorMatcher
from .models import Activity, ChangeTotals, CommitRecord, DayCount, RepoActivity


def count_days(commits: Iterable[CommitRecord], matcher: AuthorMatcher) -> tuple[DayCount, ChangeTotals]:
    days: dict[dt.date, int] = defaultdict(int)
    totals = ChangeTotals()
    for c in commits:
        if not matcher.matches(c.author_name, c.author_email):
            continue
        days[c.day] += 1
        totals.add_commit(c)
    return dict(days), totals


def merge_day_counts(*counts: Mapping[dt.date, int]) -> DayCount:
    """Sum day counts. Order of arguments does not matter; zero entries are dropped."""
    merged: dict[dt.date, int] = defaultdict(int)
    for days in counts:
        for day, n in days.items():
            merged[day] += int(n)
    return {day: n for day, n in sorted(merged.items()) if n > 0}


def aggregate_repo(
    path: Path | str,
    matcher: AuthorMatcher,
    since: dt.date | None = None,
    include_merges: bool = True,
) -> RepoActivity:
    repo = check_repository(path)
    days, totals = count_days(iter_commits(repo, since=since, include_merges=include_merges), matcher)
    return RepoActivity(path=str(repo), days=days, totals=totals)


def window_start(years: int, today: dt.date | None = None) -> dt.date:
    """First day of a trailing window covering the current year and the `years - 1` before it."""
    if years <= 0:
        raise ValueError(f"years must be positive, got {years}")
    if today is None:
        today = dt.date.today()
    return dt.date(today.year - (years - 1), 1, 1)


def collect_activity(
    author: str,
    repos: list[Path | str],
    since: dt.date | None = None,
    jobs: int = 1,
    include_merges: bool = True,
) -> Activity:
    """
    Aggregate the author's commits over all repositories.

    Each repository is read into its own RepoActivity (on a worker thread when
    jobs > 1) and the results are merged once, in input order. A repository
    that cannot be read is recorded in `failures` and skipped.
    """
    matcher = AuthorMatcher.from_identifier(author)

    def one(repo: Path | str) -> RepoActivity | RepositoryAccessError:
        try:
            return aggregate_repo(repo, matcher, since=since, include_merges=include_merges)
        except RepositoryAccessError as e:
            return e

    if jobs > 1 and len(repos) > 1:
        with ThreadPoolExecutor(max_workers=jobs) as ex:
            outcomes = list(ex.map(one, repos))
    else:
        outcomes = [one(r) for r in repos]

    results: list[RepoActivity] = []
    failures: list[RepositoryAccessError] = []
    for outcome in outcomes:
        if isinstance(outcome, RepositoryAccessError):
            failures.append(outcome)
        else:
            results.append(outcome)

    totals = ChangeTotals()
    for r in results:
        totals = totals + r.totals

    return Activity(
        days=merge_day_counts(*(r.days for r in results)),
        totals=totals,
        repos=[r.path for r in results],
        failures=failures,
    )
