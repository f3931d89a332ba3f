"""Wildcard host pattern matching in the style of ssh_config ``Host`` lines."""

from __future__ import annotations

import string as _string
from enum import IntEnum

__all__ = ["MatchResult", "match_pattern", "match_pattern_list", "match_hostname"]

# Sub-patterns must fit in a 1024 byte buffer including the terminator.
_MAX_SUBPATTERN = 1023

_ASCII_LOWER = str.maketrans(_string.ascii_uppercase, _string.ascii_lowercase)


class MatchResult(IntEnum):
    """Outcome of matching a string against a comma-separated pattern list."""

    NEGATIVE = -1
    NONE = 0
    POSITIVE = 1


def _match(s: str, pattern: str) -> bool:
    while True:
        if not pattern:
            return not s

        if pattern[0] == "*":
            pattern = pattern[1:]
            if not pattern:
                return True
            head = pattern[0]
            if head not in "?*":
                rest = pattern[1:]
                return any(
                    ch == head and _match(s[pos + 1 :], rest)
                    for pos, ch in enumerate(s)
                )
            return any(_match(s[pos:], pattern) for pos in range(len(s)))

        if not s:
            return False
        if pattern[0] != "?" and pattern[0] != s[0]:
            return False
        s, pattern = s[1:], pattern[1:]


def match_pattern(s: str | None, pattern: str | None) -> bool:
    """Return True if *s* matches *pattern*, where ``?`` and ``*`` are wildcards."""
    if s is None or pattern is None:
        return False
    return _match(s, pattern)


def _subpatterns(pattern: str) -> list[str]:
    pieces = pattern.split(",")
    # A trailing comma (or an empty pattern) does not start another sub-pattern.
    if pattern == "" or pattern.endswith(","):
        pieces.pop()
    return pieces


def match_pattern_list(string: str | None, pattern: str, dolower: bool) -> MatchResult:
    """Match *string* against comma-separated sub-patterns, each optionally negated with ``!``.

    A matching negated sub-pattern wins immediately; otherwise any positive
    match gives POSITIVE. An over-long sub-pattern yields NONE.
    """
    got_positive = False
    for piece in _subpatterns(pattern):
        negated = piece.startswith("!")
        sub = piece[1:] if negated else piece
        if len(sub) >= _MAX_SUBPATTERN:
            return MatchResult.NONE
        if dolower:
            sub = sub.translate(_ASCII_LOWER)
        if match_pattern(string, sub):
            if negated:
                return MatchResult.NEGATIVE
            got_positive = True
    return MatchResult.POSITIVE if got_positive else MatchResult.NONE


def match_hostname(host: str | None, pattern: str) -> MatchResult:
    """Match a lower-case host name against a pattern list, lower-casing the patterns."""
    return match_pattern_list(host, pattern, True)