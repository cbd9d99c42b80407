"""
Presentation state for one browser session.

The page has exactly one of four states; each is its own dataclass so that
combinations such as "success with an error message" cannot be built:

    Idle -> Processing -> Success | Failure -> (reset) -> Idle

`SessionStore` keeps the current state per session id and applies the
transitions under a lock. The remote call itself happens outside the lock;
its result is only applied if the session is still waiting on that call.
"""

import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from threading import Lock
from typing import ClassVar, Optional

from data_url import build_data_url, is_image_type

INVALID_FILE_MESSAGE = "Please upload a valid image file."
RESULT_MEDIA_TYPE = "image/png"
DEFAULT_MAX_SESSIONS = 1000


class BusyError(Exception):
    """A file was selected while a request is still in flight."""


@dataclass(frozen=True)
class Idle:
    status: ClassVar[str] = "idle"

    def to_dict(self):
        return {"status": self.status, "original": None, "processed": None, "error": ""}


@dataclass(frozen=True)
class Processing:
    original: str
    token: str = field(default_factory=lambda: uuid.uuid4().hex)
    status: ClassVar[str] = "processing"

    def to_dict(self):
        return {"status": self.status, "original": self.original, "processed": None, "error": ""}


@dataclass(frozen=True)
class Success:
    original: str
    processed: bytes
    status: ClassVar[str] = "success"

    def to_dict(self):
        return {
            "status": self.status,
            "original": self.original,
            "processed": build_data_url(RESULT_MEDIA_TYPE, self.processed),
            "error": "",
        }


@dataclass(frozen=True)
class Failure:
    message: str
    status: ClassVar[str] = "error"

    def to_dict(self):
        return {"status": self.status, "original": None, "processed": None, "error": self.message}


def select_file(file_type, data_url):
    """State after the user picks or drops a file."""
    if not is_image_type(file_type):
        return Failure(INVALID_FILE_MESSAGE)
    return Processing(original=data_url)


def complete(state, token, processed):
    if not _is_current(state, token):
        return state
    return Success(original=state.original, processed=processed)


def fail(state, token, reason):
    if not _is_current(state, token):
        return state
    return Failure(f"Failed to process image. {reason}")


def reset():
    return Idle()


def _is_current(state, token):
    return isinstance(state, Processing) and state.token == token


class SessionStore:
    """Current state per session id, keeping at most `max_sessions` entries.

    Sessions are kept in least-recently-used order; the oldest one is
    forgotten (and so reads back as idle) once the limit is exceeded.
    """

    def __init__(self, max_sessions=DEFAULT_MAX_SESSIONS):
        self.max_sessions = max_sessions
        self._states = OrderedDict()
        self._lock = Lock()

    def __len__(self):
        with self._lock:
            return len(self._states)

    def _current(self, session_id):
        state = self._states.get(session_id)
        if state is None:
            return Idle()
        self._states.move_to_end(session_id)
        return state

    def _store(self, session_id, state):
        self._states[session_id] = state
        self._states.move_to_end(session_id)
        while len(self._states) > self.max_sessions:
            self._states.popitem(last=False)

    def get(self, session_id):
        with self._lock:
            return self._current(session_id)

    def select_file(self, session_id, file_type, data_url):
        with self._lock:
            current = self._current(session_id)
            if isinstance(current, Processing):
                raise BusyError("A request is already in progress.")
            new_state = select_file(file_type, data_url)
            self._store(session_id, new_state)
            return new_state

    def complete(self, session_id, token, processed) -> Optional[Success]:
        """Apply a finished request; returns None when the result is stale."""
        with self._lock:
            current = self._current(session_id)
            new_state = complete(current, token, processed)
            if new_state is current:
                return None
            self._store(session_id, new_state)
            return new_state

    def fail(self, session_id, token, reason) -> Optional[Failure]:
        with self._lock:
            current = self._current(session_id)
            new_state = fail(current, token, reason)
            if new_state is current:
                return None
            self._store(session_id, new_state)
            return new_state

    def reset(self, session_id):
        with self._lock:
            # idle is the default, so forgetting the session is the reset
            self._states.pop(session_id, None)
            return reset()
