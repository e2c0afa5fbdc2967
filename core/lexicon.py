"""Bilingual vocabulary used by the deterministic extraction and fallback paths.

The lexicon bundles the item synonym dictionary, the stop-word list and the
marker tables (negation, purchase verbs, scheduling words, ...). Built-in
defaults cover English, Devanagari Hindi and romanized Hindi; a YAML file can
extend any table without touching the interpreter code.

Marker entries are matched as whole words. An entry ending in ``*`` matches any
word starting with that stem (``खरीद*`` matches ``खरीदना`` and ``खरीदनी``).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

import yaml

DEFAULT_SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "दूध": ("doodh", "dudh", "milk"),
    "चावल": ("chawal", "rice"),
    "आलू": ("aloo", "alu", "potato"),
    "प्याज": ("pyaaz", "pyaz", "onion"),
    "टमाटर": ("tamatar", "tomato"),
    "अंडा": ("anda", "ande", "egg"),
    "चीनी": ("cheeni", "chini", "sugar"),
    "मिर्च": ("mirch", "chilli", "chili"),
    "हल्दी": ("haldi", "turmeric"),
    "आटा": ("atta", "aata", "flour"),
}

DEFAULT_STOP_WORDS: FrozenSet[str] = frozenset(
    {
        # politeness, pronouns and fillers
        "please", "pls", "plz", "i", "me", "my", "we", "us", "our", "you", "to", "the", "a", "an",
        "some", "of", "for", "and", "also", "now", "then", "later", "need", "needs", "want", "have",
        "has", "had", "haven", "hasn", "hadn", "didn", "don", "doesn", "t", "not", "no", "never",
        "mujhe", "मुझे", "hume", "humein", "hamein", "हमें", "mera", "meri", "mere", "मेरा", "मेरी",
        "ko", "को", "ke", "के", "ka", "का", "ki", "की", "ek", "एक", "se", "से", "mein", "में", "aur",
        "और", "bhi", "भी", "kuch", "कुछ", "abhi", "अभी", "nahi", "nahin", "नहीं", "नही", "paas",
        "pass", "पास", "ne", "ने", "it", "this", "that", "these", "those", "them", "is", "are", "was",
        "be", "will", "do", "did", "at", "on", "by", "with", "can", "what", "go", "main", "maine",
        "मैं", "मैंने",
        # auxiliaries and verb particles
        "hai", "है", "hain", "हैं", "hoon", "hun", "hu", "हूँ", "हूं", "tha", "था", "thi", "थी",
        "buy", "get", "got", "grab", "pick", "up", "bought", "purchase", "purchased", "remind",
        "remember", "reminder", "lena", "leni", "lene", "लेना", "लेनी", "लेने", "lana", "laana",
        "लाना", "le", "ले", "aaya", "aayi", "आया", "आई", "liya", "लिया", "khareedna", "kharidna",
        "kharid", "kharida", "kharidni", "khareed", "khareeda", "खरीद", "खरीदना", "खरीदनी", "खरीदा",
        "खरीदे", "yaad", "याद", "karna", "करना", "jana", "jaana", "जाना", "doctor", "डॉक्टर",
        # units
        "kilo", "kg", "kgs", "किलो", "liter", "litre", "ltr", "लीटर", "piece", "pieces", "packet",
        "dozen",
        # time words
        "today", "tomorrow", "tonight", "morning", "evening", "night", "aaj", "आज", "kal", "कल",
        "subah", "सुबह", "shaam", "sham", "शाम", "raat", "रात", "baje", "बजे", "am", "pm", "min",
        "mins", "minute", "minutes", "hour", "hours", "ghante", "घंटे", "in", "after", "baad", "बाद",
    }
)

DEFAULT_MARKERS: Dict[str, Tuple[str, ...]] = {
    "negation": (
        "not", "no", "never", "haven't", "havent", "hasn't", "hasnt", "hadn't", "didn't", "didnt",
        "don't", "dont", "doesn't", "won't", "नहीं", "नही", "मत",
    ),
    # Romanized Hindi words, checked only for "hi" utterances ("mat" is an English noun too).
    "negation_hi": ("nahi", "nahin", "nhi", "mat"),
    "purchase": (
        "buy", "purchase", "pick up", "lena", "leni", "lene", "lana", "laana", "kharid*",
        "khareed*", "लेना", "लेनी", "लेने", "लाना", "खरीद*",
    ),
    "completed_purchase": (
        "bought", "purchased", "got", "picked up", "le aaya", "le aayi", "le aaye", "le liya",
        "le li", "la diya", "kharid liya", "kharid li", "khareed liya", "kharida", "khareeda",
        "ले आया", "ले आई", "ले आए", "ले लिया", "ले ली", "ला दिया", "खरीद लिया", "खरीद ली", "खरीदा",
        "खरीदे",
    ),
    "scheduling": (
        "remind", "reminder", "remember", "yaad", "याद", "karna", "करना", "jana", "jaana", "जाना",
        "appointment", "doctor", "डॉक्टर", "meeting", "schedule", "call",
    ),
    "unit": ("kilo", "kg", "kgs", "किलो", "liter", "litre", "ltr", "लीटर"),
    "recipe": (
        "recipe", "recipes", "cook*", "breakfast", "lunch", "dinner", "snack", "meal", "nashta",
        "khana", "खाना", "बनाना", "नाश्ता", "रेसिपी",
    ),
}


def _invert(synonyms: Mapping[str, Iterable[str]]) -> Dict[str, str]:
    lookup: Dict[str, str] = {}
    for canonical, aliases in synonyms.items():
        lookup[canonical.lower()] = canonical
        for alias in aliases:
            lookup[str(alias).strip().lower()] = canonical
    return lookup


@dataclass(frozen=True)
class Lexicon:
    """Immutable vocabulary tables shared by the extractor and fallback classifier."""

    synonyms: Dict[str, str] = field(default_factory=lambda: _invert(DEFAULT_SYNONYMS))
    stop_words: FrozenSet[str] = DEFAULT_STOP_WORDS
    negation: Tuple[str, ...] = DEFAULT_MARKERS["negation"]
    negation_hi: Tuple[str, ...] = DEFAULT_MARKERS["negation_hi"]
    purchase: Tuple[str, ...] = DEFAULT_MARKERS["purchase"]
    completed_purchase: Tuple[str, ...] = DEFAULT_MARKERS["completed_purchase"]
    scheduling: Tuple[str, ...] = DEFAULT_MARKERS["scheduling"]
    unit: Tuple[str, ...] = DEFAULT_MARKERS["unit"]
    recipe: Tuple[str, ...] = DEFAULT_MARKERS["recipe"]

    def canonical(self, token: str) -> Optional[str]:
        """Return the canonical item name for ``token`` (plural-tolerant)."""

        key = (token or "").strip().lower()
        if not key:
            return None
        if key in self.synonyms:
            return self.synonyms[key]
        for suffix in ("es", "s"):
            if key.endswith(suffix) and key[: -len(suffix)] in self.synonyms:
                return self.synonyms[key[: -len(suffix)]]
        return None

    def is_stop_word(self, token: str) -> bool:
        return (token or "").strip().lower() in self.stop_words

    def extended(
        self,
        *,
        synonyms: Optional[Mapping[str, Iterable[str]]] = None,
        stop_words: Iterable[str] = (),
        markers: Optional[Mapping[str, Iterable[str]]] = None,
    ) -> "Lexicon":
        """Return a copy with extra entries merged over the current tables."""

        merged_synonyms = dict(self.synonyms)
        if synonyms:
            merged_synonyms.update(_invert(synonyms))
        changes: Dict[str, object] = {
            "synonyms": merged_synonyms,
            "stop_words": self.stop_words | {word.strip().lower() for word in stop_words if word.strip()},
        }
        for name, values in (markers or {}).items():
            if name not in DEFAULT_MARKERS:
                raise ValueError(f"Unknown marker table '{name}'.")
            current: Tuple[str, ...] = getattr(self, name)
            additions = tuple(str(value).strip().lower() for value in values if str(value).strip())
            changes[name] = current + tuple(value for value in additions if value not in current)
        return replace(self, **changes)


DEFAULT_LEXICON = Lexicon()


def load_lexicon(path: Path | str | None = None, base: Lexicon = DEFAULT_LEXICON) -> Lexicon:
    """Load a YAML extension file and merge it over ``base``.

    The document may define ``synonyms`` (canonical name -> list of aliases),
    ``stop_words`` (list) and ``markers`` (table name -> list of entries).
    """

    if path is None:
        return base
    target = Path(path)
    if not target.exists():
        raise FileNotFoundError(f"Lexicon file not found: {target}")

    data = yaml.safe_load(target.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Lexicon file {target} must be a mapping at the top level.")

    synonyms = data.get("synonyms") or {}
    if not isinstance(synonyms, dict):
        raise ValueError("'synonyms' must map canonical names to alias lists.")
    normalized_synonyms: Dict[str, Tuple[str, ...]] = {}
    for canonical, aliases in synonyms.items():
        if isinstance(aliases, str):
            aliases = [aliases]
        normalized_synonyms[str(canonical).strip()] = tuple(str(alias) for alias in aliases or [])

    stop_words = data.get("stop_words") or []
    markers = data.get("markers") or {}
    if not isinstance(stop_words, list) or not isinstance(markers, dict):
        raise ValueError("'stop_words' must be a list and 'markers' a mapping.")

    return base.extended(
        synonyms=normalized_synonyms,
        stop_words=[str(word) for word in stop_words],
        markers={str(name): list(values or []) for name, values in markers.items()},
    )


__all__ = ["Lexicon", "DEFAULT_LEXICON", "DEFAULT_SYNONYMS", "load_lexicon"]
