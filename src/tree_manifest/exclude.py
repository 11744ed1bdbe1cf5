from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from tree_manifest.errors import PatternError


def _translate_class(pattern: str, start: int) -> tuple[str, int]:
    """Translate the ``[...]`` class opening at ``start``; return (regex, next index)."""

    i = start + 1
    n = len(pattern)
    negate = False
    if i < n and pattern[i] in "!^":
        negate = True
        i += 1

    body: list[str] = []
    first = True
    while i < n:
        c = pattern[i]
        if c == "]" and not first:
            break
        first = False
        if c == "\\":
            if i + 1 >= n:
                raise PatternError(pattern, "dangling escape in character class")
            body.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        body.append("-" if c == "-" else re.escape(c))
        i += 1
    else:
        raise PatternError(pattern, "unclosed character class")

    return ("[^" if negate else "[") + "".join(body) + "]", i + 1


def _is_globstar(pattern: str, i: int) -> bool:
    # "**" is recursive only when it forms a whole path component.
    if not pattern.startswith("**", i):
        return False
    before_ok = i == 0 or pattern[i - 1] == "/"
    after_ok = i + 2 == len(pattern) or pattern[i + 2] == "/"
    return before_ok and after_ok


def translate(pattern: str) -> str:
    """Translate one glob into a regular expression body (not anchored).

    ``*`` and ``?`` also match ``/``, mirroring fnmatch; ``**`` as a whole
    component spans zero or more directories.
    """

    if pattern == "":
        raise PatternError(pattern, "empty pattern")

    out: list[str] = []
    depth = 0
    i = 0
    n = len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            if _is_globstar(pattern, i):
                if i + 2 == n:
                    out.append(".*")
                    i += 2
                else:
                    out.append("(?:.*/)?")
                    i += 3
                continue
            out.append(".*")
            while i < n and pattern[i] == "*":
                i += 1
            continue
        if c == "?":
            out.append(".")
        elif c == "[":
            regex, i = _translate_class(pattern, i)
            out.append(regex)
            continue
        elif c == "{":
            depth += 1
            out.append("(?:")
        elif c == "}":
            if depth == 0:
                raise PatternError(pattern, "unopened alternate group")
            depth -= 1
            out.append(")")
        elif c == "," and depth > 0:
            out.append("|")
        elif c == "\\":
            if i + 1 >= n:
                raise PatternError(pattern, "dangling escape")
            out.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        else:
            out.append(re.escape(c))
        i += 1

    if depth:
        raise PatternError(pattern, "unclosed alternate group")
    return "".join(out)


@dataclass(frozen=True, slots=True)
class ExcludeMatcher:
    """All exclude globs of a run compiled into a single regular expression."""

    patterns: frozenset[str]
    _regex: re.Pattern[str] | None

    @classmethod
    def compile(cls, patterns: Iterable[str]) -> ExcludeMatcher:
        pattern_set = frozenset(patterns)
        bodies: list[str] = []
        # Sorted so the combined expression is the same for the same set.
        for pattern in sorted(pattern_set):
            body = translate(pattern)
            try:
                re.compile(body, re.DOTALL)
            except re.error as exc:
                raise PatternError(pattern, str(exc)) from exc
            bodies.append(f"(?:{body})")

        regex = re.compile("|".join(bodies), re.DOTALL) if bodies else None
        return cls(patterns=pattern_set, _regex=regex)

    def matches(self, rel_path: str) -> bool:
        if self._regex is None:
            return False
        return self._regex.fullmatch(rel_path) is not None


__all__ = ["ExcludeMatcher", "translate"]
