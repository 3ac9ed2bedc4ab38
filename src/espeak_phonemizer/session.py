# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Soroush Yousefpour

"""Process-wide eSpeak-ng session: one-time initialization and voice selection."""

from __future__ import annotations

import logging
import threading
from typing import Optional, Union

from .config import BackendConfig
from .espeak import EE_OK, EspeakLibrary, PhonemeBackend

_LOGGER = logging.getLogger(__name__)

_INIT_FAILED_MESSAGE = (
    "Failed to initialize eSpeak-ng. Try setting `ESPEAK_DATA_PATH` environment "
    "variable to the directory that contains the `espeak-ng-data` directory."
)


class ESpeakError(RuntimeError):
    """Raised when eSpeak-ng cannot be initialized or rejects a voice."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"eSpeak-ng Error :{self.message}"


class BackendSession:
    """Owns the native backend and its process-wide state.

    Initialization happens at most once.  If it fails, the resulting
    :class:`ESpeakError` is kept and raised again on every later call without
    retrying.

    The backend itself is not reentrant: the selected voice and eSpeak-ng's
    clause buffers are global.  Callers hold :attr:`lock` across
    :meth:`select_voice` and the clause loop that follows it.
    """

    def __init__(
        self,
        config: Optional[BackendConfig] = None,
        backend: Optional[PhonemeBackend] = None,
    ) -> None:
        self._config = config if config is not None else BackendConfig.from_env()
        self._backend = backend
        self._init_lock = threading.Lock()
        self._outcome: Union[ESpeakError, bool, None] = None
        self.lock = threading.RLock()
        self.voice: Optional[str] = None

    @property
    def initialized(self) -> bool:
        return self._outcome is True

    @property
    def backend(self) -> PhonemeBackend:
        """The initialized backend.  Raises :class:`ESpeakError` if init failed."""
        self.ensure_initialized()
        assert self._backend is not None
        return self._backend

    def ensure_initialized(self) -> None:
        outcome = self._outcome
        if outcome is None:
            with self._init_lock:
                if self._outcome is None:
                    self._outcome = self._initialize()
                outcome = self._outcome

        if isinstance(outcome, ESpeakError):
            raise outcome.with_traceback(None)

    def _initialize(self) -> Union[ESpeakError, bool]:
        try:
            if self._backend is None:
                self._backend = EspeakLibrary.load(self._config.library_path)
            sample_rate = self._backend.initialize(self._config.data_path)
        except (OSError, RuntimeError) as exc:
            _LOGGER.error("Could not load eSpeak-ng: %s", exc)
            error = ESpeakError(_INIT_FAILED_MESSAGE)
            error.__cause__ = exc
            return error

        if sample_rate <= 0:
            _LOGGER.error("espeak_Initialize returned %s (data path: %s)", sample_rate, self._config.data_path)
            return ESpeakError(_INIT_FAILED_MESSAGE)

        _LOGGER.debug("eSpeak-ng initialized (sample rate %s Hz)", sample_rate)
        return True

    def select_voice(self, language: str) -> None:
        """Switch the backend to *language*.  Raises :class:`ESpeakError` on rejection."""
        status = self.backend.set_voice_by_name(language)
        if status != EE_OK:
            raise ESpeakError(f"Failed to set eSpeak-ng voice to: `{language}` ")
        self.voice = language
        _LOGGER.debug("Selected eSpeak-ng voice %s", language)


_SESSION: Optional[BackendSession] = None
_SESSION_LOCK = threading.Lock()


def get_session() -> BackendSession:
    """Return the process-wide session, creating it on first use."""
    global _SESSION

    if _SESSION is None:
        with _SESSION_LOCK:
            if _SESSION is None:
                _SESSION = BackendSession()

    return _SESSION


def reset_session() -> None:
    """Forget the process-wide session.  Intended for tests."""
    global _SESSION

    with _SESSION_LOCK:
        _SESSION = None
