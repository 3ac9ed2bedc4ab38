# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Soroush Yousefpour

"""Phoneme text filters.  Offsets are never touched."""

from __future__ import annotations

from typing import Iterable

import regex

from .segment import PhonemeSpan

# eSpeak-ng wraps words read with another language's rules in (xx) flags.
LANG_SWITCH_PATTERN = regex.compile(r"\([^)]*\)")
STRESS_PATTERN = regex.compile(r"[ˈˌ]")


def strip_lang_switch(phonemes: str) -> str:
    return LANG_SWITCH_PATTERN.sub("", phonemes)


def strip_stress(phonemes: str) -> str:
    """Remove primary (U+02C8) and secondary (U+02CC) stress marks."""
    return STRESS_PATTERN.sub("", phonemes)


def apply_filters(
    spans: Iterable[PhonemeSpan],
    remove_lang_switch_flags: bool = False,
    remove_stress: bool = False,
) -> list[PhonemeSpan]:
    filtered = []
    for span in spans:
        phonemes = span.phonemes
        if remove_lang_switch_flags:
            phonemes = strip_lang_switch(phonemes)
        if remove_stress:
            phonemes = strip_stress(phonemes)
        filtered.append(span._replace(phonemes=phonemes))
    return filtered
