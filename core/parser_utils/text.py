"""Common text-processing helpers shared across the extraction modules."""

from __future__ import annotations

import re
import unicodedata
from functools import lru_cache
from typing import Iterable, List, Pattern, Tuple

# Latin word characters plus the whole Devanagari block (vowel signs are not
# ``\w`` for ``re``).
WORD_CHARS = r"\w\u0900-\u097f"
_APOSTROPHES = str.maketrans({"’": "'", "‘": "'", "`": "'"})


def normalize(text: str) -> str:
    """Lowercase ``text``, unify apostrophes and collapse whitespace."""

    return " ".join((text or "").translate(_APOSTROPHES).lower().split())


@lru_cache(maxsize=64)
def compile_markers(markers: Tuple[str, ...]) -> Pattern[str]:
    """Build one alternation matching any marker as a whole word.

    Entries ending with ``*`` match as stems. Longer markers are tried first so
    multi-word phrases win over their prefixes.
    """

    alternatives: List[str] = []
    for marker in sorted({m for m in markers if m}, key=len, reverse=True):
        if marker.endswith("*"):
            alternatives.append(re.escape(marker[:-1]) + rf"[{WORD_CHARS}]*")
        else:
            alternatives.append(r"\s+".join(re.escape(part) for part in marker.split()))
    if not alternatives:
        return re.compile(r"(?!x)x")
    return re.compile(rf"(?<![{WORD_CHARS}])(?:{'|'.join(alternatives)})(?![{WORD_CHARS}])")


def contains_marker(text: str, markers: Iterable[str]) -> bool:
    """Return True when any marker occurs in ``text`` as a whole word."""

    return compile_markers(tuple(markers)).search(normalize(text)) is not None


def mask_markers(text: str, markers: Iterable[str]) -> str:
    """Blank out marker occurrences so later scans do not see them."""

    return compile_markers(tuple(markers)).sub(lambda match: " " * len(match.group(0)), normalize(text))


def strip_punctuation(text: str) -> str:
    """Replace Unicode punctuation and symbols with spaces (combining marks stay)."""

    return "".join(" " if unicodedata.category(ch)[0] in {"P", "S"} else ch for ch in text or "")


def tokenize(text: str) -> List[str]:
    """Lowercase, strip punctuation/symbols and split on whitespace."""

    return strip_punctuation((text or "").lower()).split()


__all__ = [
    "WORD_CHARS",
    "compile_markers",
    "contains_marker",
    "mask_markers",
    "normalize",
    "strip_punctuation",
    "tokenize",
]
