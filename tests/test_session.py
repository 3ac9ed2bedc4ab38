# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Soroush Yousefpour

"""Tests for BackendSession initialization and voice selection."""

import threading

import pytest

from espeak_phonemizer import session as session_module
from espeak_phonemizer.config import BackendConfig
from espeak_phonemizer.session import BackendSession, ESpeakError, get_session, reset_session

from conftest import ScriptedBackend


class TestESpeakError:
    def test_str(self):
        assert str(ESpeakError("boom")) == "eSpeak-ng Error :boom"

    def test_message_attribute(self):
        assert ESpeakError("boom").message == "boom"

    def test_is_runtime_error(self):
        assert isinstance(ESpeakError("boom"), RuntimeError)


class TestInitialization:
    def test_initializes_once(self, scripted_session):
        session, backend = scripted_session()
        session.ensure_initialized()
        session.ensure_initialized()
        session.select_voice("en-US")
        assert backend.init_calls == 1
        assert session.initialized

    def test_concurrent_first_calls_initialize_once(self, scripted_session):
        session, backend = scripted_session()
        barrier = threading.Barrier(8)

        def _init():
            barrier.wait()
            session.ensure_initialized()

        threads = [threading.Thread(target=_init) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert backend.init_calls == 1

    def test_failure_is_cached(self, scripted_session):
        session, backend = scripted_session(sample_rate=-1)

        with pytest.raises(ESpeakError) as first:
            session.ensure_initialized()
        with pytest.raises(ESpeakError) as second:
            session.ensure_initialized()

        assert first.value is second.value
        assert "ESPEAK_DATA_PATH" in first.value.message
        assert backend.init_calls == 1
        assert not session.initialized

    def test_failure_blocks_voice_selection(self, scripted_session):
        session, backend = scripted_session(sample_rate=0)
        with pytest.raises(ESpeakError):
            session.select_voice("en-US")
        assert backend.voice_calls == []

    def test_missing_library_is_init_error(self):
        session = BackendSession(
            config=BackendConfig(library_path="/nonexistent/libespeak-ng.so.1")
        )
        with pytest.raises(ESpeakError) as exc_info:
            session.ensure_initialized()
        assert isinstance(exc_info.value.__cause__, OSError)
        with pytest.raises(ESpeakError) as again:
            session.ensure_initialized()
        assert again.value is exc_info.value


class TestSelectVoice:
    def test_sets_voice(self, scripted_session):
        session, backend = scripted_session()
        session.select_voice("ar")
        assert session.voice == "ar"
        assert backend.voice_calls == ["ar"]

    def test_rejected_voice(self, scripted_session):
        session, _ = scripted_session()
        with pytest.raises(ESpeakError) as exc_info:
            session.select_voice("xx-nonexistent")
        assert exc_info.value.message == "Failed to set eSpeak-ng voice to: `xx-nonexistent` "
        assert session.voice is None


class TestProcessSession:
    def test_get_session_is_singleton(self, monkeypatch):
        monkeypatch.setattr(session_module, "_SESSION", None)
        assert get_session() is get_session()

    def test_reset_session(self, monkeypatch):
        monkeypatch.setattr(session_module, "_SESSION", None)
        first = get_session()
        reset_session()
        assert get_session() is not first

    def test_default_session_reads_environment(self, monkeypatch):
        monkeypatch.setattr(session_module, "_SESSION", None)
        monkeypatch.setenv("ESPEAK_DATA_PATH", "/opt/espeak-ng-data")
        assert get_session()._config.data_path == "/opt/espeak-ng-data"
