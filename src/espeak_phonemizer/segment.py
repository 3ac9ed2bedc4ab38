# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Soroush Yousefpour

"""Clause segmentation, boundary snapping and line splitting.

All offsets are UTF-8 byte offsets into the full input document.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, NamedTuple, Optional

import numpy as np

from .boundaries import build_word_boundaries, is_boundary
from .espeak import PhonemeBackend, clause_kind, intonation_mark, is_sentence_end

_LOGGER = logging.getLogger(__name__)


class RawSpan(NamedTuple):
    """A sentence as counted by the backend, before snapping to word edges."""

    start: int
    end: int
    phonemes: str
    final: bool = False  # offsets are passed through snapping unchanged


class PhonemeSpan(NamedTuple):
    """A word-aligned slice ``[start, end)`` of the input and its phonemes."""

    start: int
    end: int
    phonemes: str


def snap_span(start: int, end: int, boundaries: np.ndarray) -> tuple[int, int]:
    """Move *start* (never past *end*) and then *end* forward onto word boundaries."""
    while start < end and not is_boundary(boundaries, start):
        start += 1
    while not is_boundary(boundaries, end):
        end += 1
    return start, end


def snap(raw_spans: Iterable[RawSpan], boundaries: np.ndarray) -> list[PhonemeSpan]:
    spans = []
    for raw in raw_spans:
        if raw.final:
            spans.append(PhonemeSpan(raw.start, raw.end, raw.phonemes))
            continue
        start, end = snap_span(raw.start, raw.end, boundaries)
        spans.append(PhonemeSpan(start, end, raw.phonemes))
    return spans


def segment_line(
    backend: PhonemeBackend,
    line: bytes,
    base_offset: int,
    text_mode: int,
    phoneme_mode: int,
    boundaries: Optional[np.ndarray] = None,
) -> list[RawSpan]:
    """Run the clause primitive over one line and collect sentence spans.

    Clauses are accumulated until the backend reports a sentence boundary.
    The span's end is derived from how far the cursor moved since the last
    sentence: ``start + consumed + base_offset - 1``, or
    ``len(line) + base_offset - 1`` once the cursor is exhausted.  Each span
    starts where the previous one ended after snapping, so *boundaries* (the
    line's own index) is consulted while segmenting.

    Phonemes left over after the last sentence are emitted with the most
    recent start/end pair.
    """
    if boundaries is None:
        boundaries = build_word_boundaries(line)

    spans: list[RawSpan] = []
    parts: list[str] = []
    previous_position = 0
    start = end = base_offset

    for clause in backend.iter_clauses(line, text_mode, phoneme_mode):
        parts.append(clause.phonemes)
        parts.append(intonation_mark(clause.terminator))

        if not is_sentence_end(clause.terminator):
            continue

        start = end
        if clause.position is not None:
            raw_end = start + (clause.position - previous_position) + base_offset - 1
        else:
            raw_end = len(line) + base_offset - 1
        # A cursor that did not move must not produce end < start.
        raw_end = max(raw_end, start)

        spans.append(RawSpan(start, raw_end, "".join(parts)))
        _LOGGER.debug(
            "%s boundary at byte %s: raw span (%s, %s)",
            clause_kind(clause.terminator).value,
            clause.position,
            start,
            raw_end,
        )
        start, end = snap_span(start, raw_end, boundaries)
        parts = []
        if clause.position is not None:
            previous_position = clause.position

    trailing = "".join(parts)
    if trailing:
        # Stale offsets: the trailing clause has no sentence boundary of its own.
        spans.append(RawSpan(start, end, trailing, final=True))

    return spans


def iter_lines(data: bytes) -> Iterator[tuple[int, bytes]]:
    """Yield ``(base_offset, line)`` for each ``\\n``-terminated line of *data*.

    A ``\\r`` before the newline is dropped from the line but still counted
    in the offsets.  A trailing newline does not produce an empty final line.
    """
    offset = 0
    while offset < len(data):
        newline = data.find(b"\n", offset)
        if newline == -1:
            line, following = data[offset:], len(data)
        else:
            line, following = data[offset:newline], newline + 1
        if line.endswith(b"\r"):
            line = line[:-1]
        yield offset, line
        offset = following


def iter_line_spans(
    backend: PhonemeBackend,
    text: str,
    text_mode: int,
    phoneme_mode: int,
) -> Iterator[list[PhonemeSpan]]:
    """Yield the snapped spans of each non-blank line of *text*, in order."""
    data = text.encode("utf-8")
    for base_offset, line in iter_lines(data):
        if not line.strip():
            continue
        boundaries = build_word_boundaries(line)
        raw_spans = segment_line(backend, line, base_offset, text_mode, phoneme_mode, boundaries)
        _LOGGER.debug("Line at byte %s produced %s span(s)", base_offset, len(raw_spans))
        yield snap(raw_spans, boundaries)


def split_and_segment(
    backend: PhonemeBackend,
    text: str,
    text_mode: int,
    phoneme_mode: int,
) -> list[PhonemeSpan]:
    spans: list[PhonemeSpan] = []
    for line_spans in iter_line_spans(backend, text, text_mode, phoneme_mode):
        spans.extend(line_spans)
    return spans
