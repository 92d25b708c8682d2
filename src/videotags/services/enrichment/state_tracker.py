"""
Enrichment state tracker.

Tracks, per video ID, where the video is in the enrichment lifecycle:

    ELIGIBLE -> QUEUED -> IN_FLIGHT -> DONE
                   \\          |
                    +---------+--> ELIGIBLE  (failure / release)

A video is in at most one of the ``in_flight`` and ``done`` collections.
Every mutation goes through ``_transition`` under a single lock, so
callbacks resolving concurrently cannot lose each other's updates.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Iterable, Optional

from videotags.exceptions import EnrichmentStateError
from videotags.models.enums import EnrichmentState

logger = logging.getLogger(__name__)

# Target state -> states it may be entered from
_ALLOWED_TRANSITIONS: dict[EnrichmentState, frozenset[EnrichmentState]] = {
    EnrichmentState.QUEUED: frozenset({EnrichmentState.ELIGIBLE}),
    EnrichmentState.IN_FLIGHT: frozenset(
        {EnrichmentState.ELIGIBLE, EnrichmentState.QUEUED}
    ),
    EnrichmentState.DONE: frozenset(
        {EnrichmentState.ELIGIBLE, EnrichmentState.QUEUED, EnrichmentState.IN_FLIGHT}
    ),
    EnrichmentState.ELIGIBLE: frozenset(
        {EnrichmentState.QUEUED, EnrichmentState.IN_FLIGHT}
    ),
}


class EnrichmentStateTracker:
    """
    Owns the per-video enrichment state for one view lifetime.

    Parameters
    ----------
    max_attempts : int | None, optional
        Failed attempts after which a video stops being eligible. ``None``
        (the default) retries forever.

    Examples
    --------
    >>> tracker = EnrichmentStateTracker()
    >>> tracker.mark_in_flight("vid-1")
    >>> tracker.is_eligible("vid-1")
    False
    >>> tracker.mark_failed("vid-1")
    >>> tracker.is_eligible("vid-1")
    True
    """

    def __init__(self, max_attempts: Optional[int] = None) -> None:
        """Initialize the tracker with every video eligible."""
        if max_attempts is not None and max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self._max_attempts = max_attempts
        self._states: dict[str, EnrichmentState] = {}
        self._attempts: dict[str, int] = {}
        self._lock = Lock()

    @property
    def max_attempts(self) -> Optional[int]:
        """Retry budget per video, or None when unbounded."""
        return self._max_attempts

    @property
    def done(self) -> frozenset[str]:
        """IDs whose enrichment completed (or was found unnecessary)."""
        with self._lock:
            return self._ids_in(EnrichmentState.DONE)

    @property
    def in_flight(self) -> frozenset[str]:
        """IDs whose generate/persist round trip is outstanding."""
        with self._lock:
            return self._ids_in(EnrichmentState.IN_FLIGHT)

    @property
    def queued(self) -> frozenset[str]:
        """IDs selected for the current run but not yet started."""
        with self._lock:
            return self._ids_in(EnrichmentState.QUEUED)

    def state(self, video_id: str) -> EnrichmentState:
        """Get the current state of a video."""
        with self._lock:
            return self._states.get(video_id, EnrichmentState.ELIGIBLE)

    def attempts(self, video_id: str) -> int:
        """Get the number of failed attempts recorded for a video."""
        with self._lock:
            return self._attempts.get(video_id, 0)

    def is_exhausted(self, video_id: str) -> bool:
        """Check whether a video has used up its retry budget."""
        with self._lock:
            return self._is_exhausted(video_id)

    def is_eligible(self, video_id: str) -> bool:
        """
        Check whether a video may be scheduled.

        Returns
        -------
        bool
            True if the video is neither done, queued nor in flight, and
            has retry budget left.
        """
        with self._lock:
            state = self._states.get(video_id, EnrichmentState.ELIGIBLE)
            return state is EnrichmentState.ELIGIBLE and not self._is_exhausted(
                video_id
            )

    def mark_queued(self, video_ids: Iterable[str]) -> None:
        """Reserve videos for the current run."""
        with self._lock:
            for video_id in video_ids:
                self._transition(video_id, EnrichmentState.QUEUED)

    def mark_in_flight(self, video_id: str) -> None:
        """
        Record that the external round trip for a video is starting.

        Raises
        ------
        EnrichmentStateError
            If the video is already in flight or done.
        """
        with self._lock:
            self._transition(video_id, EnrichmentState.IN_FLIGHT)

    def mark_done(self, video_id: str) -> None:
        """Record that a video needs no further enrichment."""
        with self._lock:
            self._transition(video_id, EnrichmentState.DONE)

    def mark_failed(self, video_id: str) -> None:
        """
        Return an in-flight video to eligible and count the attempt.

        Raises
        ------
        EnrichmentStateError
            If the video is not in flight.
        """
        with self._lock:
            current = self._states.get(video_id, EnrichmentState.ELIGIBLE)
            if current is not EnrichmentState.IN_FLIGHT:
                raise EnrichmentStateError(
                    video_id, current.value, EnrichmentState.ELIGIBLE.value
                )
            self._transition(video_id, EnrichmentState.ELIGIBLE)
            self._attempts[video_id] = self._attempts.get(video_id, 0) + 1
            if self._is_exhausted(video_id):
                logger.warning(
                    f"Video {video_id} failed {self._attempts[video_id]} times; "
                    f"no further enrichment attempts"
                )

    def release(self, video_ids: Iterable[str]) -> list[str]:
        """
        Return stranded queued or in-flight videos to eligible.

        Videos in any other state are left alone. No attempt is counted.

        Returns
        -------
        list[str]
            The IDs that were released.
        """
        released: list[str] = []
        with self._lock:
            for video_id in video_ids:
                if self._states.get(video_id) in (
                    EnrichmentState.QUEUED,
                    EnrichmentState.IN_FLIGHT,
                ):
                    self._transition(video_id, EnrichmentState.ELIGIBLE)
                    released.append(video_id)
        if released:
            logger.debug(f"Released {len(released)} stranded videos: {released}")
        return released

    def reset(self, video_id: str) -> None:
        """
        Forget everything known about a video so it can be enriched again.

        Raises
        ------
        EnrichmentStateError
            If the video is in flight.
        """
        with self._lock:
            current = self._states.get(video_id, EnrichmentState.ELIGIBLE)
            if current is EnrichmentState.IN_FLIGHT:
                raise EnrichmentStateError(
                    video_id, current.value, EnrichmentState.ELIGIBLE.value
                )
            self._states.pop(video_id, None)
            self._attempts.pop(video_id, None)
        logger.info(f"Reset enrichment state for video {video_id}")

    def snapshot(self) -> dict[str, EnrichmentState]:
        """Copy of every non-eligible video's state."""
        with self._lock:
            return dict(self._states)

    def _ids_in(self, state: EnrichmentState) -> frozenset[str]:
        return frozenset(
            video_id for video_id, current in self._states.items() if current is state
        )

    def _is_exhausted(self, video_id: str) -> bool:
        if self._max_attempts is None:
            return False
        return self._attempts.get(video_id, 0) >= self._max_attempts

    def _transition(self, video_id: str, target: EnrichmentState) -> None:
        """Apply one validated transition. Caller must hold the lock."""
        current = self._states.get(video_id, EnrichmentState.ELIGIBLE)
        if current not in _ALLOWED_TRANSITIONS[target]:
            raise EnrichmentStateError(video_id, current.value, target.value)
        if target is EnrichmentState.ELIGIBLE:
            del self._states[video_id]
        else:
            self._states[video_id] = target
        logger.debug(f"Video {video_id}: {current.value} -> {target.value}")
