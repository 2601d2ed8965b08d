"""In-memory registry of live workout sessions."""

import time
import uuid
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Callable, Dict, List, Optional, Union

import logging

from formcoach.config import get_settings
from formcoach.cv.events import EventCollector
from formcoach.cv.exercise import ExerciseMode, ExerciseThresholds
from formcoach.cv.workout_session import WorkoutSession

logger = logging.getLogger(__name__)


class RegistryFullError(Exception):
    """Raised when max_active_sessions are already running."""


@dataclass
class LiveSession:
    """A workout session plus the buffer its events are collected into."""
    session_id: str
    session: WorkoutSession
    collector: EventCollector = field(default_factory=EventCollector)
    created_at: float = field(default_factory=time.time)
    last_active_at: float = field(default_factory=time.time)


class SessionRegistry:
    """
    Owns every live WorkoutSession, keyed by id.

    Sessions are independent; each is only ever driven by the request or
    stream that addresses its id. A session nobody has touched for
    idle_timeout_seconds is evicted the next time a session is created.

    Args:
        thresholds: Configuration handed to every new session
        max_sessions: Cap on sessions held at once
        idle_timeout_seconds: Inactivity after which a session may be evicted
        clock: Returns the current time in seconds
    """

    def __init__(
        self,
        thresholds: Optional[ExerciseThresholds] = None,
        max_sessions: int = 100,
        idle_timeout_seconds: float = 600.0,
        clock: Callable[[], float] = time.time,
    ):
        self.thresholds = thresholds or ExerciseThresholds()
        self.max_sessions = max_sessions
        self.idle_timeout_seconds = idle_timeout_seconds
        self._clock = clock
        self._sessions: Dict[str, LiveSession] = {}

    def create(self, mode: Union[ExerciseMode, str]) -> LiveSession:
        self.evict_idle()
        if len(self._sessions) >= self.max_sessions:
            raise RegistryFullError(f"{self.max_sessions} sessions already active")

        session = WorkoutSession(mode=mode, thresholds=self.thresholds)
        now = self._clock()
        live = LiveSession(
            session_id=str(uuid.uuid4()),
            session=session,
            created_at=now,
            last_active_at=now,
        )
        session.add_listener(live.collector)
        self._sessions[live.session_id] = live

        logger.info(f"Session {live.session_id} started ({session.mode.value})")
        return live

    def get(self, session_id: str) -> Optional[LiveSession]:
        """Look up a session and mark it active."""
        live = self._sessions.get(session_id)
        if live is not None:
            live.last_active_at = self._clock()
        return live

    def remove(self, session_id: str, reason: str = "ended") -> bool:
        live = self._sessions.pop(session_id, None)
        if live is None:
            return False
        stats = live.session.get_stats()
        lifetime = self._clock() - live.created_at
        logger.info(
            f"Session {session_id} {reason} after {lifetime:.0f}s: mode={stats.mode.value}, "
            f"count={stats.count}, elapsed={stats.elapsed_seconds}s"
        )
        return True

    def evict_idle(self) -> List[str]:
        """Drop sessions idle longer than idle_timeout_seconds. Returns their ids."""
        cutoff = self._clock() - self.idle_timeout_seconds
        stale = [sid for sid, live in self._sessions.items() if live.last_active_at < cutoff]
        for session_id in stale:
            self.remove(session_id, reason="expired")
        return stale

    def __len__(self) -> int:
        return len(self._sessions)


@lru_cache
def get_registry() -> SessionRegistry:
    """Dependency returning the process-wide registry."""
    settings = get_settings()
    return SessionRegistry(
        thresholds=ExerciseThresholds.from_settings(settings),
        max_sessions=settings.max_active_sessions,
        idle_timeout_seconds=settings.session_idle_timeout_seconds,
    )
