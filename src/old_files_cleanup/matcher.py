"""Include/exclude matching for sweep candidates."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class LiteralPattern:
    """Matches when the path's final segment equals ``name``."""

    name: str

    def matches(self, path: Path) -> bool:
        return path.name == self.name

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class RegexPattern:
    """Matches when ``regex`` is found anywhere in the full path."""

    regex: re.Pattern[str]

    def matches(self, path: Path) -> bool:
        return self.regex.search(str(path)) is not None

    def __str__(self) -> str:
        return f"/{self.regex.pattern}/"


Pattern = LiteralPattern | RegexPattern
PatternLike = str | re.Pattern[str] | Pattern


def to_pattern(value: PatternLike) -> Pattern:
    """Convert a plain string or compiled regex into a pattern.

    Args:
        value: Basename literal, compiled regex, or an existing pattern.

    Returns:
        The corresponding pattern variant.

    Raises:
        TypeError: If the value is none of the supported kinds.

    """
    if isinstance(value, LiteralPattern | RegexPattern):
        return value
    if isinstance(value, str):
        return LiteralPattern(value)
    if isinstance(value, re.Pattern):
        return RegexPattern(value)
    raise TypeError(f"Unsupported pattern type: {type(value).__name__}")


def matches(
    path: Path | str,
    include: Iterable[PatternLike] = (),
    exclude: Iterable[PatternLike] = (),
) -> bool:
    """Decide whether a path is selected by the include/exclude rules.

    Inclusion is checked first; exclusion always wins over inclusion.
    An empty include list selects every path.

    Args:
        path: Path of the candidate file.
        include: Patterns a path must match at least one of. Plain strings
            and compiled regexes are converted with ``to_pattern``.
        exclude: Patterns that deselect a path.

    Returns:
        True if the path is selected for deletion consideration.

    Raises:
        TypeError: If a pattern is none of the supported kinds.

    """
    path = Path(path)
    include = [to_pattern(p) for p in include]
    exclude = [to_pattern(p) for p in exclude]
    if not include and not exclude:
        return True

    included = not include or any(pattern.matches(path) for pattern in include)
    if not included:
        return False

    return not any(pattern.matches(path) for pattern in exclude)
