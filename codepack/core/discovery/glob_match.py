# codepack/core/discovery/glob_match.py
"""
Shell-style glob matching over a single path string.

Unlike `fnmatch`, wildcards never cross the path separator:

    *        any run of non-separator characters
    ?        any single non-separator character
    [...]    character class of characters and `lo-hi` ranges, `[^...]` negated
    \\c      the literal character c (not available when the separator is `\\`)

Patterns are validated as a whole. A malformed pattern (unterminated class,
empty class, dangling escape, range with a missing bound) raises
`GlobPatternError` instead of quietly matching or not matching.
"""
import os
import re
from functools import lru_cache
from typing import List, Tuple

from codepack.exceptions import GlobPatternError


def _class_char(pattern: str, i: int, sep: str) -> Tuple[str, int]:
    # reads one (possibly escaped) class member starting at pattern[i].
    if i >= len(pattern) or pattern[i] in "-]":
        raise GlobPatternError(f"bad character class in glob pattern {pattern!r}")
    if pattern[i] == "\\" and sep != "\\":
        i += 1
        if i >= len(pattern):
            raise GlobPatternError(f"dangling escape in glob pattern {pattern!r}")
    char = pattern[i]
    i += 1
    if i >= len(pattern):
        raise GlobPatternError(f"unterminated character class in glob pattern {pattern!r}")
    return char, i


def _translate_class(pattern: str, i: int, sep: str) -> Tuple[str, int]:
    # i points just past the opening bracket.
    negated = False
    if i < len(pattern) and pattern[i] == "^":
        negated = True
        i += 1

    ranges: List[Tuple[str, str]] = []
    nrange = 0
    while True:
        if i < len(pattern) and pattern[i] == "]" and nrange > 0:
            i += 1
            break
        lo, i = _class_char(pattern, i, sep)
        hi = lo
        if pattern[i] == "-":
            hi, i = _class_char(pattern, i + 1, sep)
        # an inverted range is legal but matches nothing.
        if lo <= hi:
            ranges.append((lo, hi))
        nrange += 1

    body = "".join(
        re.escape(lo) if lo == hi else f"{re.escape(lo)}-{re.escape(hi)}"
        for lo, hi in ranges
    )
    if not body:
        return (".", i) if negated else ("(?!)", i)
    return (f"[^{body}]" if negated else f"[{body}]"), i


@lru_cache(maxsize=1024)
def translate_glob(pattern: str, sep: str = os.sep) -> "re.Pattern[str]":
    """Compiles a glob pattern into an anchored regular expression."""
    not_sep = f"[^{re.escape(sep)}]"
    parts: List[str] = []
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "*":
            while i < len(pattern) and pattern[i] == "*":
                i += 1
            parts.append(f"{not_sep}*")
            continue
        if char == "?":
            parts.append(not_sep)
            i += 1
        elif char == "[":
            class_regex, i = _translate_class(pattern, i + 1, sep)
            parts.append(class_regex)
        elif char == "\\" and sep != "\\":
            if i + 1 >= len(pattern):
                raise GlobPatternError(f"dangling escape in glob pattern {pattern!r}")
            parts.append(re.escape(pattern[i + 1]))
            i += 2
        else:
            parts.append(re.escape(char))
            i += 1
    return re.compile("".join(parts), re.DOTALL)


def glob_match(pattern: str, name: str, sep: str = os.sep) -> bool:
    # raises GlobPatternError for a malformed pattern.
    return translate_glob(pattern, sep).fullmatch(name) is not None
