# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Soroush Yousefpour

"""ctypes binding to the eSpeak-ng clause-level phonemization API.

This is the only module that deals with foreign memory.  Everything above it
works with ``bytes`` buffers and integer byte offsets: the cursor that
``espeak_TextToPhonemesWithTerminator`` advances is reported back as an offset
into the buffer that was handed in, or ``None`` once the input is exhausted.
"""

from __future__ import annotations

import ctypes
import logging
from enum import Enum, IntEnum
from typing import Iterator, NamedTuple, Optional, Protocol

_LOGGER = logging.getLogger(__name__)

# speak_lib.h
AUDIO_OUTPUT_RETRIEVAL = 1
ESPEAK_INITIALIZE_PHONEME_IPA = 0x0002
ESPEAK_INITIALIZE_DONT_EXIT = 0x8000
ESPEAK_CHARS_UTF8 = 1
ESPEAK_SSML = 0x10
EE_OK = 0

# translate.h: terminator layout
CLAUSE_PAUSE = 0x00000FFF
CLAUSE_INTONATION_TYPE = 0x0000F000
CLAUSE_TYPE = 0x000F0000
CLAUSE_TYPE_CLAUSE = 0x00040000
CLAUSE_TYPE_SENTENCE = 0x00080000
_PARAGRAPH_PAUSE = 70


class Intonation(IntEnum):
    """Intonation field of a clause terminator."""

    FULL_STOP = 0x00000000
    COMMA = 0x00001000
    QUESTION = 0x00002000
    EXCLAMATION = 0x00003000
    NONE = 0x00004000


class ClauseKind(Enum):
    """Structural level of a clause terminator."""

    WORD = "word"
    CLAUSE = "clause"
    SENTENCE = "sentence"
    PARAGRAPH = "paragraph"


_INTONATION_MARKS = {
    Intonation.FULL_STOP: ".",
    Intonation.COMMA: ",",
    Intonation.QUESTION: "?",
    Intonation.EXCLAMATION: "!",
}


def intonation_of(terminator: int) -> Optional[Intonation]:
    """Return the intonation encoded in *terminator*, or None if unrecognised."""
    try:
        return Intonation(terminator & CLAUSE_INTONATION_TYPE)
    except ValueError:
        return None


def intonation_mark(terminator: int) -> str:
    """Punctuation appended after a clause's phonemes (empty for no intonation)."""
    intonation = intonation_of(terminator)
    if intonation is None:
        return ""
    return _INTONATION_MARKS.get(intonation, "")


def is_sentence_end(terminator: int) -> bool:
    return (terminator & CLAUSE_TYPE_SENTENCE) == CLAUSE_TYPE_SENTENCE


def clause_kind(terminator: int) -> ClauseKind:
    if is_sentence_end(terminator):
        if (terminator & CLAUSE_PAUSE) >= _PARAGRAPH_PAUSE:
            return ClauseKind.PARAGRAPH
        return ClauseKind.SENTENCE
    if terminator & CLAUSE_TYPE_CLAUSE:
        return ClauseKind.CLAUSE
    return ClauseKind.WORD


class Clause(NamedTuple):
    """One call's worth of output from the clause primitive."""

    phonemes: str
    position: Optional[int]  # cursor byte offset after the call; None when exhausted
    terminator: int


class PhonemeBackend(Protocol):
    """The native operations the session and segmenter rely on."""

    def initialize(self, data_path: Optional[str] = None) -> int: ...

    def set_voice_by_name(self, name: str) -> int: ...

    def iter_clauses(self, text: bytes, text_mode: int, phoneme_mode: int) -> Iterator[Clause]: ...


def resolve_library(library_path: Optional[str] = None) -> str:
    """Return the path of the eSpeak-ng shared library.

    An explicit *library_path* wins; otherwise the lookup is delegated to
    phonemizer, which honours ``PHONEMIZER_ESPEAK_LIBRARY`` and falls back to
    the system search path.
    """
    if library_path:
        return str(library_path)

    from phonemizer.backend.espeak.wrapper import EspeakWrapper

    return EspeakWrapper.library()


class EspeakLibrary:
    """Thin wrapper around a loaded ``libespeak-ng``."""

    def __init__(self, lib: ctypes.CDLL) -> None:
        self._lib = lib

        lib.espeak_Initialize.argtypes = [ctypes.c_int, ctypes.c_int, ctypes.c_char_p, ctypes.c_int]
        lib.espeak_Initialize.restype = ctypes.c_int

        lib.espeak_SetVoiceByName.argtypes = [ctypes.c_char_p]
        lib.espeak_SetVoiceByName.restype = ctypes.c_int

        lib.espeak_TextToPhonemesWithTerminator.argtypes = [
            ctypes.POINTER(ctypes.c_void_p),
            ctypes.c_int,
            ctypes.c_int,
            ctypes.POINTER(ctypes.c_int),
        ]
        lib.espeak_TextToPhonemesWithTerminator.restype = ctypes.c_char_p

    @classmethod
    def load(cls, library_path: Optional[str] = None) -> "EspeakLibrary":
        """Locate and load the shared library.

        Raises:
            OSError: The library could not be loaded.
            RuntimeError: No library could be found.
        """
        path = resolve_library(library_path)
        _LOGGER.debug("Loading eSpeak-ng library from %s", path)
        return cls(ctypes.cdll.LoadLibrary(path))

    def initialize(self, data_path: Optional[str] = None) -> int:
        """Initialize eSpeak-ng for phoneme retrieval; returns the sample rate (<= 0 on failure)."""
        path = data_path.encode("utf-8") if data_path else None
        return self._lib.espeak_Initialize(
            AUDIO_OUTPUT_RETRIEVAL, 0, path, ESPEAK_INITIALIZE_DONT_EXIT
        )

    def set_voice_by_name(self, name: str) -> int:
        return self._lib.espeak_SetVoiceByName(name.encode("utf-8"))

    def iter_clauses(self, text: bytes, text_mode: int, phoneme_mode: int) -> Iterator[Clause]:
        """Phonemize *text* one clause at a time.

        eSpeak-ng keeps read-ahead state between calls, so the buffer and the
        cursor live for the whole iteration.  The generator stops after the
        call that leaves the cursor NULL.
        """
        buffer = ctypes.create_string_buffer(text)
        base = ctypes.addressof(buffer)
        cursor = ctypes.c_void_p(base)
        terminator = ctypes.c_int(0)

        while cursor.value is not None:
            result = self._lib.espeak_TextToPhonemesWithTerminator(
                ctypes.byref(cursor), text_mode, phoneme_mode, ctypes.byref(terminator)
            )
            phonemes = result.decode("utf-8") if result else ""
            position = None if cursor.value is None else cursor.value - base
            yield Clause(phonemes, position, terminator.value)
