# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Soroush Yousefpour

"""In-memory stand-ins for the eSpeak-ng clause primitive."""

from __future__ import annotations

import re
import threading

import pytest

from espeak_phonemizer.espeak import (
    CLAUSE_TYPE_CLAUSE,
    CLAUSE_TYPE_SENTENCE,
    Clause,
    Intonation,
)
from espeak_phonemizer.session import BackendSession

SENTENCE = CLAUSE_TYPE_SENTENCE
CLAUSE = CLAUSE_TYPE_CLAUSE
FULL_STOP = Intonation.FULL_STOP
COMMA = Intonation.COMMA
QUESTION = Intonation.QUESTION
EXCLAMATION = Intonation.EXCLAMATION


class ScriptedBackend:
    """Replays recorded clauses for known lines.

    *script* maps a line (str) to a list of ``(phonemes, position,
    terminator)`` triples, mirroring what eSpeak-ng reports for it.
    """

    def __init__(self, script=None, sample_rate=22050, voices=("en-US", "ar")):
        self.script = {k.encode("utf-8"): v for k, v in (script or {}).items()}
        self.sample_rate = sample_rate
        self.voices = set(voices)
        self.init_calls = 0
        self.voice_calls = []
        self.clause_calls = []
        self._lock = threading.Lock()

    def initialize(self, data_path=None):
        with self._lock:
            self.init_calls += 1
        return self.sample_rate

    def set_voice_by_name(self, name):
        self.voice_calls.append(name)
        return 0 if name in self.voices else 2

    def iter_clauses(self, text, text_mode, phoneme_mode):
        self.clause_calls.append((text, text_mode, phoneme_mode))
        for phonemes, position, terminator in self.script[text]:
            yield Clause(phonemes, position, int(terminator))


_CLAUSE_RE = re.compile(rb"([^.,?!]*)([.,?!]?)\s*")
_TERMINATORS = {
    b".": FULL_STOP | SENTENCE,
    b"?": QUESTION | SENTENCE,
    b"!": EXCLAMATION | SENTENCE,
    b",": COMMA | CLAUSE,
    b"": FULL_STOP | SENTENCE,
}


class PunctuationBackend(ScriptedBackend):
    """Splits on ``.,?!`` and reads one byte past the following whitespace.

    The "phonemes" are the lower-cased clause words, which is enough to
    exercise the offset bookkeeping on arbitrary text.
    """

    def iter_clauses(self, text, text_mode, phoneme_mode):
        self.clause_calls.append((text, text_mode, phoneme_mode))
        pos = 0
        while pos < len(text):
            match = _CLAUSE_RE.match(text, pos)
            body, punct = match.group(1), match.group(2)
            following = match.end()
            position = following + 1 if following < len(text) else None
            yield Clause(
                body.decode("utf-8").strip().lower(),
                position,
                int(_TERMINATORS[punct]),
            )
            pos = following


@pytest.fixture
def scripted_session():
    def _make(script=None, **kwargs):
        backend = ScriptedBackend(script, **kwargs)
        return BackendSession(backend=backend), backend

    return _make


TEXT_ALICE = "Who are you? said the Caterpillar. Replied Alice , rather shyly, I hardly know, sir!"

ALICE_SCRIPT = {
    TEXT_ALICE: [
        ("hˈuː ɑːɹ juː", 14, QUESTION | SENTENCE),
        ("sˈɛd ðə kˈæɾɚpˌɪlɚ", 36, FULL_STOP | SENTENCE),
        ("ɹᵻplˈaɪd ˈælɪs", 52, COMMA | CLAUSE),
        ("ɹˈæðɚ ʃˈaɪli", 66, COMMA | CLAUSE),
        ("aɪ hˈɑːɹdli nˈoʊ", 81, COMMA | CLAUSE),
        ("sˌɜː", None, EXCLAMATION | SENTENCE),
    ]
}

TEXT_LINES = "Hello\nThere I love you. Say goodbye when you leave.\nAnd\nWelcome"

LINES_SCRIPT = {
    "Hello": [("həlˈoʊ", None, FULL_STOP | SENTENCE)],
    "There I love you. Say goodbye when you leave.": [
        ("ðɛɹ aɪ lˈʌv juː", 19, FULL_STOP | SENTENCE),
        ("sˈeɪ ɡʊdbˈaɪ wɛn juː lˈiːv", None, FULL_STOP | SENTENCE),
    ],
    "And": [("ænd", None, FULL_STOP | SENTENCE)],
    "Welcome": [("wˈɛlkʌm", None, FULL_STOP | SENTENCE)],
}

