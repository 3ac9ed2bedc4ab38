# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Soroush Yousefpour

"""espeak-phonemizer: word-aligned phoneme spans from eSpeak-ng."""

__version__ = "0.1.0"

from .boundaries import build_word_boundaries
from .config import BackendConfig, PhonemizeOptions
from .filters import strip_lang_switch, strip_stress
from .phonemize import Phonemizer, iter_phonemes, text_to_phonemes
from .segment import PhonemeSpan
from .session import BackendSession, ESpeakError, get_session

__all__ = [
    "__version__",
    "BackendConfig",
    "PhonemizeOptions",
    "BackendSession",
    "ESpeakError",
    "get_session",
    "PhonemeSpan",
    "Phonemizer",
    "text_to_phonemes",
    "iter_phonemes",
    "build_word_boundaries",
    "strip_lang_switch",
    "strip_stress",
]
