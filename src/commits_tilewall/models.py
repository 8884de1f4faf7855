from __future__ import annotations

import dataclasses
import datetime as dt

from .errors import RepositoryAccessError

DayCount = dict[dt.date, int]


@dataclasses.dataclass(frozen=True)
class CommitRecord:
    day: dt.date  # committer local calendar date
    author_name: str
    author_email: str
    insertions: int = 0
    deletions: int = 0
    files_changed: int = 0


@dataclasses.dataclass
class ChangeTotals:
    commits: int = 0
    files_changed: int = 0
    insertions: int = 0
    deletions: int = 0

    def add_commit(self, c: CommitRecord) -> None:
        self.commits += 1
        self.files_changed += c.files_changed
        self.insertions += c.insertions
        self.deletions += c.deletions

    def __add__(self, other: "ChangeTotals") -> "ChangeTotals":
        return ChangeTotals(
            commits=self.commits + other.commits,
            files_changed=self.files_changed + other.files_changed,
            insertions=self.insertions + other.insertions,
            deletions=self.deletions + other.deletions,
        )


@dataclasses.dataclass
class RepoActivity:
    path: str
    days: DayCount
    totals: ChangeTotals


@dataclasses.dataclass
class Activity:
    days: DayCount
    totals: ChangeTotals
    repos: list[str]
    failures: list[RepositoryAccessError]

    @property
    def first_day(self) -> dt.date | None:
        return min(self.days) if self.days else None

    @property
    def last_day(self) -> dt.date | None:
        return max(self.days) if self.days else None

    @property
    def active_days(self) -> int:
        return len(self.days)
