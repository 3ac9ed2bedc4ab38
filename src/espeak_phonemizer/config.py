# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Soroush Yousefpour

"""Configuration dataclasses for the eSpeak-ng backend and phonemization calls."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from .espeak import (
    ESPEAK_CHARS_UTF8,
    ESPEAK_INITIALIZE_PHONEME_IPA,
    ESPEAK_SSML,
)

DATA_PATH_ENV = "ESPEAK_DATA_PATH"
LIBRARY_PATH_ENV = "PHONEMIZER_ESPEAK_LIBRARY"
DEFAULT_LANGUAGE = "en-US"


@dataclass
class BackendConfig:
    """Where to find the native eSpeak-ng library and its data directory."""

    library_path: Optional[str] = None
    data_path: Optional[str] = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "BackendConfig":
        return cls(
            library_path=d.get("library_path"),
            data_path=d.get("data_path"),
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BackendConfig":
        """Read ``PHONEMIZER_ESPEAK_LIBRARY`` and ``ESPEAK_DATA_PATH``.

        Empty values are treated as unset.
        """
        env = os.environ if environ is None else environ
        return cls(
            library_path=env.get(LIBRARY_PATH_ENV) or None,
            data_path=env.get(DATA_PATH_ENV) or None,
        )


@dataclass
class PhonemizeOptions:
    """Per-call options for :func:`espeak_phonemizer.text_to_phonemes`."""

    language: str = DEFAULT_LANGUAGE
    is_ssml: bool = False
    phoneme_separator: Optional[str] = None
    remove_lang_switch_flags: bool = False
    remove_stress: bool = False

    def __post_init__(self) -> None:
        if self.phoneme_separator is not None and len(self.phoneme_separator) != 1:
            raise ValueError(
                f"phoneme_separator must be a single character, got {self.phoneme_separator!r}"
            )

    @property
    def text_mode(self) -> int:
        """Text flags for the clause primitive: always UTF-8, optionally SSML."""
        if self.is_ssml:
            return ESPEAK_CHARS_UTF8 | ESPEAK_SSML
        return ESPEAK_CHARS_UTF8

    @property
    def phoneme_mode(self) -> int:
        """IPA output, with the separator code point packed into bits 8 and up."""
        if self.phoneme_separator is None:
            return ESPEAK_INITIALIZE_PHONEME_IPA
        return (ord(self.phoneme_separator) << 8) | ESPEAK_INITIALIZE_PHONEME_IPA

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "PhonemizeOptions":
        return cls(
            language=d.get("language", DEFAULT_LANGUAGE),
            is_ssml=d.get("is_ssml", False),
            phoneme_separator=d.get("phoneme_separator"),
            remove_lang_switch_flags=d.get("remove_lang_switch_flags", False),
            remove_stress=d.get("remove_stress", False),
        )

    @classmethod
    def from_file(cls, path: str | Path) -> "PhonemizeOptions":
        """Load options from a JSON file."""
        d = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls.from_dict(d)
