# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Soroush Yousefpour

"""Text to word-aligned phoneme spans using eSpeak-ng."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Optional

from .config import PhonemizeOptions
from .filters import apply_filters
from .segment import PhonemeSpan, iter_line_spans, split_and_segment
from .session import BackendSession, get_session

_LOGGER = logging.getLogger(__name__)


def _check_text(text: str) -> None:
    # eSpeak-ng reads a NUL-terminated buffer; anything after a NUL would be lost.
    if "\0" in text:
        raise ValueError("text must not contain NUL characters")


def _phonemize(text: str, options: PhonemizeOptions, session: BackendSession) -> list[PhonemeSpan]:
    _check_text(text)
    with session.lock:
        session.ensure_initialized()
        session.select_voice(options.language)
        spans = split_and_segment(session.backend, text, options.text_mode, options.phoneme_mode)

    _LOGGER.debug("Phonemized %s line(s) as %s: %s span(s)", text.count("\n") + 1, options.language, len(spans))
    return apply_filters(
        spans,
        remove_lang_switch_flags=options.remove_lang_switch_flags,
        remove_stress=options.remove_stress,
    )


def _iter_phonemes(
    text: str, options: PhonemizeOptions, session: BackendSession
) -> Iterator[PhonemeSpan]:
    with session.lock:
        session.ensure_initialized()
        session.select_voice(options.language)
        for line_spans in iter_line_spans(
            session.backend, text, options.text_mode, options.phoneme_mode
        ):
            yield from apply_filters(
                line_spans,
                remove_lang_switch_flags=options.remove_lang_switch_flags,
                remove_stress=options.remove_stress,
            )


def text_to_phonemes(
    text: str,
    language: str,
    is_ssml: bool = False,
    phoneme_separator: Optional[str] = None,
    remove_lang_switch_flags: bool = False,
    remove_stress: bool = False,
    session: Optional[BackendSession] = None,
) -> list[PhonemeSpan]:
    """Convert *text* into sentence spans with their IPA phonemes.

    Args:
        text: Input text.  May span several lines.
        language: eSpeak-ng voice name, e.g. ``"en-US"`` or ``"ar"``.
        is_ssml: Treat *text* as SSML markup.
        phoneme_separator: Single character placed between phonemes.
        remove_lang_switch_flags: Drop ``(en)``-style language switch flags.
        remove_stress: Drop primary and secondary stress marks.
        session: Backend session; the process-wide one by default.

    Returns:
        ``PhonemeSpan(start, end, phonemes)`` tuples where ``start`` and
        ``end`` are UTF-8 byte offsets into *text*.  Blank lines produce no
        spans.

    Raises:
        ESpeakError: eSpeak-ng failed to initialize or rejected *language*.
        ValueError: *phoneme_separator* is not a single character, or
            *text* contains a NUL character.
    """
    options = PhonemizeOptions(
        language=language,
        is_ssml=is_ssml,
        phoneme_separator=phoneme_separator,
        remove_lang_switch_flags=remove_lang_switch_flags,
        remove_stress=remove_stress,
    )
    return _phonemize(text, options, session if session is not None else get_session())


def iter_phonemes(
    text: str,
    language: str,
    is_ssml: bool = False,
    phoneme_separator: Optional[str] = None,
    remove_lang_switch_flags: bool = False,
    remove_stress: bool = False,
    session: Optional[BackendSession] = None,
) -> Iterator[PhonemeSpan]:
    """Like :func:`text_to_phonemes`, but yield spans as each line finishes.

    The session lock is held until the generator is exhausted or closed, so
    consume it promptly.
    """
    options = PhonemizeOptions(
        language=language,
        is_ssml=is_ssml,
        phoneme_separator=phoneme_separator,
        remove_lang_switch_flags=remove_lang_switch_flags,
        remove_stress=remove_stress,
    )
    _check_text(text)
    return _iter_phonemes(text, options, session if session is not None else get_session())


class Phonemizer:
    """eSpeak-ng phonemizer bound to one set of :class:`PhonemizeOptions`.

    The simplest usage::

        phonemizer = Phonemizer(PhonemizeOptions(language="en-US"))
        for start, end, phonemes in phonemizer.phonemize("Hello there."):
            ...

    All calls sharing a session are serialized by the session lock.
    """

    def __init__(
        self,
        options: Optional[PhonemizeOptions] = None,
        session: Optional[BackendSession] = None,
    ) -> None:
        self._options = options if options is not None else PhonemizeOptions()
        self._session = session if session is not None else get_session()

    @classmethod
    def from_file(cls, path: str | Path, session: Optional[BackendSession] = None) -> "Phonemizer":
        """Build a Phonemizer from a JSON options file."""
        return cls(PhonemizeOptions.from_file(path), session=session)

    @property
    def options(self) -> PhonemizeOptions:
        return self._options

    def phonemize(self, text: str) -> list[PhonemeSpan]:
        """Return the word-aligned phoneme spans of *text*."""
        if not text or not text.strip():
            return []
        return _phonemize(text, self._options, self._session)

    def phonemize_text(self, text: str) -> str:
        """Return the phonemes of every span joined into one string."""
        return "".join(span.phonemes for span in self.phonemize(text))

    def iter_phonemes(self, text: str) -> Iterator[PhonemeSpan]:
        """Yield spans line by line.  Holds the session lock while iterating."""
        _check_text(text)
        return _iter_phonemes(text, self._options, self._session)
