"""Shared helper utilities for text matching."""

from .text import WORD_CHARS, compile_markers, contains_marker, mask_markers, normalize, tokenize

__all__ = [
    "WORD_CHARS",
    "compile_markers",
    "contains_marker",
    "mask_markers",
    "normalize",
    "tokenize",
]
