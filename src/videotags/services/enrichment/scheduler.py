"""
Enrichment scheduler.

Drives the metadata enrichment pipeline for a set of candidate videos:
selects the ones that still lack metadata, then for each one asks the
tagging service for hashtags, classifies them, stores the result and
pushes it into the display collection.

Videos are processed in chunks of ``concurrency``. Calls inside a chunk
run concurrently; the next chunk starts only after every video of the
current one has settled, so no more than ``concurrency`` round trips are
ever outstanding.

A forced run regenerates metadata for videos that already have it, and a
limit caps how many videos one run touches; together they cover bulk
regeneration of an index.

A run is guarded by a small state machine::

    IDLE --run()--> RUNNING --finished--> COOLING_DOWN --cooldown elapsed--> IDLE

``run()`` outside IDLE is refused. The cooldown absorbs triggers fired by
the same page update that started the batch. Time comes from an injected
clock so the transition can be driven without sleeping.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Iterator, Optional, Sequence, TypeVar

from videotags.exceptions import MetadataPersistenceError, TagGenerationError
from videotags.models.enrichment_report import (
    EnrichmentDetail,
    EnrichmentReport,
    EnrichmentSummary,
)
from videotags.models.enums import EnrichmentState, SchedulerState
from videotags.models.metadata import (
    DEFAULT_COMPLETENESS_FIELDS,
    metadata_to_tags,
    metadata_value,
)
from videotags.models.video import VideoRecord
from videotags.services.enrichment.result_merger import DisplayCollection
from videotags.services.enrichment.state_tracker import EnrichmentStateTracker
from videotags.services.hashtag_classifier import HashtagClassifier
from videotags.services.interfaces import (
    IngestionStatusInterface,
    MetadataStoreInterface,
    TagGeneratorInterface,
    VideoListingInterface,
)

logger = logging.getLogger(__name__)

# Defaults for the concurrency bound and post-batch cooldown
DEFAULT_CONCURRENCY = 10
DEFAULT_COOLDOWN_SECONDS = 2.0

_BUSY_STATES = (EnrichmentState.QUEUED, EnrichmentState.IN_FLIGHT)

Clock = Callable[[], float]
T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """
    Split ``items`` into consecutive chunks of at most ``size``.

    Examples
    --------
    >>> [len(c) for c in chunked(list(range(25)), 10)]
    [10, 10, 5]
    """
    if size < 1:
        raise ValueError(f"Chunk size must be at least 1, got {size}")
    for start in range(0, len(items), size):
        yield items[start : start + size]


def has_complete_metadata(
    record: VideoRecord,
    completeness_fields: Sequence[str] = DEFAULT_COMPLETENESS_FIELDS,
) -> bool:
    """Check whether any completeness field of ``record`` is filled in."""
    if not record.user_metadata:
        return False
    return any(
        metadata_value(record.user_metadata, field) for field in completeness_fields
    )


def needs_enrichment(
    record: VideoRecord,
    completeness_fields: Sequence[str] = DEFAULT_COMPLETENESS_FIELDS,
    require_ready_status: bool = True,
) -> bool:
    """
    Decide whether a video should be sent for enrichment.

    Parameters
    ----------
    record : VideoRecord
        The candidate video.
    completeness_fields : Sequence[str]
        Categories that count as "has metadata" when any is non-empty.
    require_ready_status : bool
        If True, a video whose ingestion status is known and not ready is
        never eligible.

    Returns
    -------
    bool
        True if the video has no metadata bag, an empty one, or every
        completeness field empty, and is not mid-ingestion.
    """
    if require_ready_status and record.is_indexing:
        return False
    return not has_complete_metadata(record, completeness_fields)


class EnrichmentScheduler:
    """
    Runs bounded-concurrency enrichment batches for one index.

    Parameters
    ----------
    tag_generator : TagGeneratorInterface
        Produces hashtag text for a video.
    metadata_store : MetadataStoreInterface
        Persists classified metadata.
    index_id : str
        Index the videos belong to.
    tracker : EnrichmentStateTracker, optional
        Per-video state; a fresh one is created if omitted.
    collection : DisplayCollection, optional
        Receives each video's metadata once it is stored.
    classifier : HashtagClassifier, optional
        Hashtag classifier (default keyword dictionary if omitted).
    ingestion_status : IngestionStatusInterface, optional
        Source of per-video ingestion status, queried once per run.
    listing : VideoListingInterface, optional
        Used to re-fetch each enriched video so its display item shows the
        stored metadata. Requires ``collection``.
    concurrency : int
        Maximum outstanding round trips, i.e. chunk size (default 10).
    cooldown : float
        Seconds to stay in COOLING_DOWN after a batch (default 2.0).
    completeness_fields : Sequence[str]
        Categories checked by ``needs_enrichment``.
    require_ready_status : bool
        Skip videos that are still indexing (default True).
    call_timeout : float | None
        Per-call timeout in seconds for generate and update; None waits
        indefinitely.
    clock : Callable[[], float]
        Monotonic clock in seconds (default ``time.monotonic``).

    Examples
    --------
    >>> scheduler = EnrichmentScheduler(
    ...     tag_generator=client,
    ...     metadata_store=client,
    ...     index_id="idx-content",
    ...     collection=collection,
    ... )
    >>> report = await scheduler.run(page.data)
    >>> print(report.summary.videos_enriched)
    """

    def __init__(
        self,
        tag_generator: TagGeneratorInterface,
        metadata_store: MetadataStoreInterface,
        index_id: str,
        tracker: Optional[EnrichmentStateTracker] = None,
        collection: Optional[DisplayCollection] = None,
        classifier: Optional[HashtagClassifier] = None,
        ingestion_status: Optional[IngestionStatusInterface] = None,
        listing: Optional[VideoListingInterface] = None,
        concurrency: int = DEFAULT_CONCURRENCY,
        cooldown: float = DEFAULT_COOLDOWN_SECONDS,
        completeness_fields: Sequence[str] = DEFAULT_COMPLETENESS_FIELDS,
        require_ready_status: bool = True,
        call_timeout: Optional[float] = None,
        clock: Clock = time.monotonic,
    ) -> None:
        """Initialize EnrichmentScheduler in the IDLE state."""
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        if cooldown < 0:
            raise ValueError(f"cooldown must not be negative, got {cooldown}")
        if not index_id:
            raise ValueError("index_id is required")

        self.tag_generator = tag_generator
        self.metadata_store = metadata_store
        self.index_id = index_id
        self.tracker = tracker if tracker is not None else EnrichmentStateTracker()
        self.collection = collection
        self.classifier = classifier if classifier is not None else HashtagClassifier()
        self.ingestion_status = ingestion_status
        self.listing = listing
        self.concurrency = concurrency
        self.cooldown = cooldown
        self.completeness_fields = tuple(completeness_fields)
        self.require_ready_status = require_ready_status
        self.call_timeout = call_timeout
        self._clock = clock

        self._state = SchedulerState.IDLE
        self._cooldown_until = 0.0

    # -------------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------------

    @property
    def state(self) -> SchedulerState:
        """Current batch state; COOLING_DOWN lapses to IDLE on the clock."""
        if (
            self._state is SchedulerState.COOLING_DOWN
            and self._clock() >= self._cooldown_until
        ):
            self._state = SchedulerState.IDLE
            logger.debug("Enrichment cooldown elapsed; scheduler idle")
        return self._state

    @property
    def is_running(self) -> bool:
        """Check if a batch is currently running."""
        return self._state is SchedulerState.RUNNING

    @property
    def cooldown_remaining(self) -> float:
        """Seconds left before the scheduler accepts another run."""
        if self.state is not SchedulerState.COOLING_DOWN:
            return 0.0
        return max(0.0, self._cooldown_until - self._clock())

    def _begin(self) -> bool:
        state = self.state
        if state is not SchedulerState.IDLE:
            logger.info(f"Enrichment run skipped: scheduler is {state.value}")
            return False
        self._state = SchedulerState.RUNNING
        return True

    def _finish(self) -> None:
        self._cooldown_until = self._clock() + self.cooldown
        self._state = SchedulerState.COOLING_DOWN

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def _triage(self, record: VideoRecord, force: bool) -> str:
        """Classify one candidate as selected, not_eligible, not_ready or complete."""
        if force:
            if self.tracker.state(record.id) in _BUSY_STATES:
                return "not_eligible"
        elif not self.tracker.is_eligible(record.id):
            return "not_eligible"
        if self.require_ready_status and record.is_indexing:
            return "not_ready"
        if not force and has_complete_metadata(record, self.completeness_fields):
            return "complete"
        return "selected"

    def preview(
        self,
        candidates: Sequence[VideoRecord],
        force: bool = False,
        limit: Optional[int] = None,
    ) -> list[str]:
        """
        List the IDs a run would enrich, without side effects.

        Uses the statuses the records carry; call ``apply_statuses`` first
        (or use ``preview_page``) to see what a run with an ingestion-status
        source would pick.

        Parameters
        ----------
        candidates : Sequence[VideoRecord]
            Videos to consider.
        force : bool
            Include videos that already have metadata or were enriched.
        limit : int, optional
            Maximum number of videos; None or 0 means no limit.

        Returns
        -------
        list[str]
            Eligible IDs needing enrichment, in candidate order.
        """
        selected: list[str] = []
        seen: set[str] = set()
        for record in candidates:
            if record.id in seen:
                continue
            seen.add(record.id)
            if self._triage(record, force) == "selected":
                selected.append(record.id)
        if limit:
            selected = selected[:limit]
        return selected

    async def preview_page(
        self,
        candidates: Sequence[VideoRecord],
        force: bool = False,
        limit: Optional[int] = None,
    ) -> list[str]:
        """Like ``preview``, after applying ingestion statuses as ``run`` does."""
        return self.preview(await self.apply_statuses(candidates), force, limit)

    def _select(
        self,
        candidates: Sequence[VideoRecord],
        summary: EnrichmentSummary,
        details: list[EnrichmentDetail],
        force: bool = False,
        limit: Optional[int] = None,
    ) -> list[VideoRecord]:
        selected: list[VideoRecord] = []
        seen: set[str] = set()
        for record in candidates:
            if record.id in seen:
                continue
            seen.add(record.id)

            verdict = self._triage(record, force)
            if verdict == "not_eligible":
                summary.not_eligible += 1
            elif verdict == "not_ready":
                summary.not_ready += 1
            elif verdict == "complete":
                # Already enriched: remember it so later scans skip it cheaply
                self.tracker.mark_done(record.id)
                summary.already_complete += 1
                details.append(EnrichmentDetail(video_id=record.id, status="skipped"))
            else:
                selected.append(record)

        if limit and len(selected) > limit:
            summary.over_limit = len(selected) - limit
            logger.info(f"Limited to {limit} of {len(selected)} videos needing enrichment")
            selected = selected[:limit]
        if force:
            for record in selected:
                if not self.tracker.is_eligible(record.id):
                    self.tracker.reset(record.id)
        return selected

    async def apply_statuses(
        self, candidates: Sequence[VideoRecord]
    ) -> list[VideoRecord]:
        """
        Overlay statuses from the ingestion-status source onto ``candidates``.

        Returns the records unchanged when no source is configured, the
        ready check is off, or the lookup fails (logged).
        """
        if self.ingestion_status is None or not self.require_ready_status:
            return list(candidates)
        try:
            statuses = await self._call(
                self.ingestion_status.get_statuses(
                    self.index_id, [record.id for record in candidates]
                )
            )
        except Exception as e:
            logger.warning(f"Could not load ingestion statuses, using listing data: {e}")
            return list(candidates)
        return [
            record.model_copy(update={"indexing_status": statuses[record.id]})
            if record.id in statuses
            else record
            for record in candidates
        ]

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    async def process_page(
        self,
        records: Sequence[VideoRecord],
        force: bool = False,
        limit: Optional[int] = None,
    ) -> Optional[EnrichmentReport]:
        """
        Merge a freshly loaded page set into the collection, then enrich it.

        Parameters
        ----------
        records : Sequence[VideoRecord]
            Every record of the currently loaded pages.
        force : bool
            Passed to ``run``.
        limit : int, optional
            Passed to ``run``.

        Returns
        -------
        Optional[EnrichmentReport]
            The run's report, or None if the scheduler was busy.
        """
        if self.collection is not None:
            self.collection.refresh(records)
        return await self.run(records, force=force, limit=limit)

    async def run(
        self,
        candidates: Sequence[VideoRecord],
        force: bool = False,
        limit: Optional[int] = None,
    ) -> Optional[EnrichmentReport]:
        """
        Enrich every eligible candidate that lacks metadata.

        Per-video failures are logged and leave the video eligible for a
        later run. If the batch itself fails or is cancelled, videos it had
        reserved are released and the scheduler still moves to
        COOLING_DOWN; cancellation is re-raised.

        Parameters
        ----------
        candidates : Sequence[VideoRecord]
            Videos to consider.
        force : bool
            Regenerate metadata even for videos that already have it or
            were enriched earlier; their tracked state is reset first.
            Videos queued or in flight are still skipped.
        limit : int, optional
            Enrich at most this many videos; None or 0 means no limit.

        Returns
        -------
        Optional[EnrichmentReport]
            The run's report, or None if the scheduler was not IDLE.
        """
        if not self._begin():
            return None

        started_at = datetime.now(timezone.utc)
        summary = EnrichmentSummary(candidates=len(candidates))
        details: list[EnrichmentDetail] = []
        reserved: list[str] = []

        try:
            records = await self.apply_statuses(candidates)
            selected = self._select(records, summary, details, force, limit)
            reserved = [record.id for record in selected]
            self.tracker.mark_queued(reserved)

            if selected:
                logger.info(
                    f"Enriching {len(selected)} of {len(candidates)} videos "
                    f"in index {self.index_id} (concurrency {self.concurrency})"
                )

            for chunk in chunked(selected, self.concurrency):
                summary.chunks += 1
                results = await asyncio.gather(
                    *(self._enrich_one(record) for record in chunk),
                    return_exceptions=True,
                )
                for record, result in zip(chunk, results):
                    if isinstance(result, BaseException):
                        logger.error(
                            f"Unexpected error enriching video {record.id}: {result!r}"
                        )
                        result = EnrichmentDetail(
                            video_id=record.id, status="failed", error=repr(result)
                        )
                    details.append(result)
                    if result.status == "enriched":
                        summary.videos_enriched += 1
                    else:
                        summary.videos_failed += 1
        except Exception:
            logger.exception(f"Enrichment batch for index {self.index_id} aborted")
        finally:
            released = self.tracker.release(reserved)
            if released:
                logger.warning(
                    f"Released {len(released)} videos left pending by the batch"
                )
            self._finish()

        logger.info(
            f"Enrichment batch finished: {summary.videos_enriched} enriched, "
            f"{summary.videos_failed} failed, {summary.already_complete} already complete"
        )
        return EnrichmentReport(
            timestamp=started_at,
            index_id=self.index_id,
            summary=summary,
            details=details,
        )

    async def _enrich_one(self, record: VideoRecord) -> EnrichmentDetail:
        video_id = record.id
        self.tracker.mark_in_flight(video_id)
        try:
            text = await self._call(self.tag_generator.generate(video_id))
            if not text or not text.strip():
                raise TagGenerationError(
                    f"No hashtags generated for video {video_id}", video_id=video_id
                )
            metadata = self.classifier.classify(text)
            stored = await self._call(
                self.metadata_store.update(video_id, self.index_id, metadata)
            )
            if not stored:
                raise MetadataPersistenceError(
                    f"Metadata update rejected for video {video_id}",
                    video_id=video_id,
                    index_id=self.index_id,
                )
        except Exception as e:
            self.tracker.mark_failed(video_id)
            error = str(e) or type(e).__name__
            logger.warning(f"Enrichment failed for video {video_id}: {error}")
            return EnrichmentDetail(video_id=video_id, status="failed", error=error)

        if self.collection is not None:
            self.collection.apply_enrichment(video_id, metadata)
        self.tracker.mark_done(video_id)
        if self.listing is not None and self.collection is not None:
            await self._refresh_displayed(video_id)
        tags = metadata_to_tags(metadata.to_user_metadata())
        logger.debug(f"Enriched video {video_id} with {len(tags)} tags")
        return EnrichmentDetail(
            video_id=video_id,
            status="enriched",
            hashtags=text.strip(),
            tags_count=len(tags),
        )

    async def _refresh_displayed(self, video_id: str) -> None:
        """Re-fetch an enriched video and show what the index now stores."""
        try:
            record = await self._call(self.listing.get_video(self.index_id, video_id))
        except Exception as e:
            logger.warning(f"Could not refresh video {video_id} after enrichment: {e}")
            return
        self.collection.refresh_item(record)

    async def _call(self, awaitable: Awaitable[Any]) -> Any:
        if self.call_timeout is None:
            return await awaitable
        return await asyncio.wait_for(awaitable, timeout=self.call_timeout)
