from __future__ import annotations

import dataclasses


def normalize_identity(text: str) -> str:
    return (text or "").strip().casefold()


@dataclasses.dataclass(frozen=True)
class AuthorMatcher:
    """
    Case-insensitive substring match against the author name OR email.

    `alice` matches "Alice Smith <a@x.org>" and "Bob <alice@example.com>".
    `ALICE@EXAMPLE.COM` matches "alice@example.com". Leading and trailing
    whitespace in the identifier is ignored; an empty identifier matches nothing.
    """

    needle: str

    @classmethod
    def from_identifier(cls, identifier: str) -> "AuthorMatcher":
        return cls(normalize_identity(identifier))

    def matches(self, author_name: str, author_email: str) -> bool:
        if not self.needle:
            return False
        if self.needle in normalize_identity(author_name):
            return True
        return self.needle in normalize_identity(author_email)
