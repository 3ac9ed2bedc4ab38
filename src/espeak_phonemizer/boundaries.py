# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Soroush Yousefpour

"""Word boundary index over UTF-8 byte offsets."""

from __future__ import annotations

import numpy as np
import regex

_WORD_BOUNDARY = regex.compile(r"\b")


def build_word_boundaries(text: str | bytes) -> np.ndarray:
    """Return a boolean array marking the word boundaries of *text*.

    The array has one entry per UTF-8 byte offset, ``len(encoded) + 1`` in
    total.  ``True`` at offset ``p`` means ``p`` sits between a run of word
    characters (letters, marks, digits, connector punctuation) and a run of
    anything else, or at the start/end of the text next to a word character.
    """
    if isinstance(text, bytes):
        text = text.decode("utf-8")

    widths = np.fromiter(
        (len(ch.encode("utf-8")) for ch in text), dtype=np.intp, count=len(text)
    )
    byte_offsets = np.zeros(len(text) + 1, dtype=np.intp)
    np.cumsum(widths, out=byte_offsets[1:])

    boundaries = np.zeros(int(byte_offsets[-1]) + 1, dtype=bool)
    char_positions = np.fromiter(
        (m.start() for m in _WORD_BOUNDARY.finditer(text)), dtype=np.intp
    )
    boundaries[byte_offsets[char_positions]] = True
    return boundaries


def is_boundary(boundaries: np.ndarray, position: int) -> bool:
    """Look up *position*; anything outside the index counts as a boundary."""
    if 0 <= position < len(boundaries):
        return bool(boundaries[position])
    return True
