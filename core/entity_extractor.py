"""Deterministic entity extraction over raw utterances.

Every function here is a pure function of its arguments (plus the immutable
lexicon), so repeated calls with the same text always return the same values.
"""

from __future__ import annotations

import re
from typing import List, Optional

from core.lexicon import DEFAULT_LEXICON, Lexicon
from core.parser_utils.text import WORD_CHARS, contains_marker, mask_markers, tokenize

_QUANTITY_WITH_UNIT = re.compile(
    r"(?P<amount>\d+(?:\.\d+)?)\s*(?P<unit>kilo|kgs|kg|liter|litre|ltr|piece|pieces|pcs|किलो|लीटर)",
    re.IGNORECASE,
)
_BARE_NUMBER = re.compile(
    rf"(?<![\d:.])(?P<amount>\d+(?:\.\d+)?)(?![\d:])(?!\s*(?:a\.m\.|p\.m\.|am|pm|baje|बजे|min|mins|minute|minutes"
    rf"|hour|hours|hr|hrs|ghante|ghanta|मिनट|मिन|घंटे|घंटा)(?![{WORD_CHARS}]))"
)
_NUMBER_TOKEN = re.compile(r"^\d+(?:\.\d+)?$")
_KG_UNITS = ("kilo", "kg", "kgs", "किलो")
_LITER_UNITS = ("liter", "litre", "ltr", "लीटर")
_ITEM_SEPARATORS = re.compile(r"\s+(?:and|aur|और)\s+|[,+]", re.IGNORECASE)
_UNUSABLE_ITEM_PHRASES = re.compile(r"^(?:है|hai)?\s*(?:खरीदना|kharidna|khareedna)?$", re.IGNORECASE)


def extract_item_name(text: str, lexicon: Lexicon = DEFAULT_LEXICON) -> str:
    """Return the canonical item mentioned in ``text`` (or ``""``).

    The first non-stop token found in the synonym dictionary wins; otherwise
    the last remaining non-stop token is returned as a best effort.
    """

    candidates = [token for token in tokenize(text) if not lexicon.is_stop_word(token) and not _is_number(token)]
    for token in candidates:
        canonical = lexicon.canonical(token)
        if canonical:
            return canonical
    return candidates[-1] if candidates else ""


def extract_multiple_items(text: str, lexicon: Lexicon = DEFAULT_LEXICON) -> List[str]:
    """Split on conjunctions/commas/plus signs and extract one item per segment."""

    items: List[str] = []
    for segment in _ITEM_SEPARATORS.split(f" {text or ''} "):
        name = extract_item_name(segment, lexicon)
        if name and name not in items:
            items.append(name)
    return items


def extract_quantity(text: str) -> float:
    """Return the leading amount of a quantity phrase, ``0`` when absent."""

    lowered = (text or "").lower()
    match = _QUANTITY_WITH_UNIT.search(lowered) or _BARE_NUMBER.search(lowered)
    if not match:
        return 0
    amount = float(match.group("amount"))
    return int(amount) if amount.is_integer() else amount


def extract_unit(text: str) -> str:
    """Return ``kg``, ``liter`` or the default ``pieces``."""

    lowered = (text or "").lower()
    if any(unit in lowered for unit in _KG_UNITS):
        return "kg"
    if any(unit in lowered for unit in _LITER_UNITS):
        return "liter"
    return "pieces"


def has_negation(text: str, lexicon: Lexicon = DEFAULT_LEXICON, language: str = "en") -> bool:
    """Check the shared negation markers, plus romanized Hindi ones for ``hi``."""

    markers = lexicon.negation + lexicon.negation_hi if language == "hi" else lexicon.negation
    return contains_marker(text, markers)


def has_completed_purchase(text: str, lexicon: Lexicon = DEFAULT_LEXICON) -> bool:
    return contains_marker(text, lexicon.completed_purchase)


def has_purchase_intent(text: str, lexicon: Lexicon = DEFAULT_LEXICON) -> bool:
    """True for a buy verb that is not part of a completed-purchase phrase."""

    remaining = mask_markers(text, lexicon.completed_purchase)
    return contains_marker(remaining, lexicon.purchase)


def is_usable_item(name: Optional[str], lexicon: Lexicon = DEFAULT_LEXICON) -> bool:
    """Reject empty names, lone stop words and title fragments such as ``है``."""

    value = (name or "").strip()
    if not value or _is_number(value):
        return False
    if lexicon.is_stop_word(value):
        return False
    return not _UNUSABLE_ITEM_PHRASES.match(value)


def canonical_item(name: str, lexicon: Lexicon = DEFAULT_LEXICON) -> str:
    """Map a model-provided item to its canonical script form when known."""

    value = (name or "").strip()
    direct = lexicon.canonical(value)
    if direct:
        return direct
    for token in tokenize(value):
        canonical = lexicon.canonical(token)
        if canonical:
            return canonical
    return value


def _is_number(token: str) -> bool:
    return _NUMBER_TOKEN.match(token) is not None


__all__ = [
    "canonical_item",
    "extract_item_name",
    "extract_multiple_items",
    "extract_quantity",
    "extract_unit",
    "has_completed_purchase",
    "has_negation",
    "has_purchase_intent",
    "is_usable_item",
]
