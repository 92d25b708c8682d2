"""
Dependency Injection Container for videotags.

Wires the enrichment pipeline from settings:

- The Twelve Labs client and hashtag classifier are singletons, cached
  via @cached_property (lazy initialization)
- Display collections and schedulers are created per view (transient)
- The state tracker is shared by every scheduler of one container, so
  overlapping views never enrich the same video twice

Usage
-----
    >>> from videotags.container import container
    >>> collection = container.create_display_collection()
    >>> scheduler = container.create_scheduler("idx-content", collection)

Tests can build a container over their own settings, or call
``container.reset()`` after injecting mocks.
"""

from __future__ import annotations

import logging
from functools import cached_property
from typing import Optional

from videotags.config.settings import Settings
from videotags.config.settings import settings as default_settings
from videotags.exceptions import ConfigurationError
from videotags.models.keyword_dictionary import DEFAULT_KEYWORDS, KeywordDictionary
from videotags.services.enrichment.result_merger import DisplayCollection
from videotags.services.enrichment.scheduler import EnrichmentScheduler
from videotags.services.enrichment.state_tracker import EnrichmentStateTracker
from videotags.services.hashtag_classifier import HashtagClassifier
from videotags.services.twelvelabs_client import TwelveLabsClient

logger = logging.getLogger(__name__)


class Container:
    """
    Dependency injection container for videotags.

    Parameters
    ----------
    settings : Settings, optional
        Settings to build from (default: the module-level settings).

    Examples
    --------
    >>> container = Container()
    >>> container.twelvelabs_client is container.twelvelabs_client
    True
    >>> container.create_display_collection() is container.create_display_collection()
    False
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings if settings is not None else default_settings

    # -------------------------------------------------------------------------
    # Singletons
    # -------------------------------------------------------------------------

    @cached_property
    def twelvelabs_client(self) -> TwelveLabsClient:
        """
        Get the Twelve Labs client (singleton).

        Raises
        ------
        ConfigurationError
            If no API key is configured.
        """
        if not self.settings.has_api_credentials:
            raise ConfigurationError(
                "TWELVELABS_API_KEY is not set", setting_name="twelvelabs_api_key"
            )
        return TwelveLabsClient(
            api_key=self.settings.twelvelabs_api_key,
            base_url=self.settings.twelvelabs_api_base_url,
            timeout=float(self.settings.request_timeout),
            max_retries=self.settings.retry_attempts,
            backoff_base=self.settings.retry_backoff,
        )

    @cached_property
    def keyword_dictionary(self) -> KeywordDictionary:
        """
        Get the keyword dictionary (singleton).

        Loaded from ``keyword_dictionary_path`` when set, otherwise the
        built-in dictionary.

        Raises
        ------
        ConfigurationError
            If the configured file cannot be read or is invalid.
        """
        path = self.settings.keyword_dictionary_path
        if path is None:
            return DEFAULT_KEYWORDS
        try:
            keywords = KeywordDictionary.from_file(path)
        except (OSError, ValueError) as e:
            raise ConfigurationError(
                f"Cannot load keyword dictionary from {path}: {e}",
                setting_name="keyword_dictionary_path",
            ) from e
        logger.info(f"Loaded keyword dictionary from {path}")
        return keywords

    @cached_property
    def hashtag_classifier(self) -> HashtagClassifier:
        """Get the hashtag classifier (singleton)."""
        return HashtagClassifier(self.keyword_dictionary)

    @cached_property
    def state_tracker(self) -> EnrichmentStateTracker:
        """Get the shared enrichment state tracker (singleton)."""
        return EnrichmentStateTracker(
            max_attempts=self.settings.enrichment_max_attempts
        )

    # -------------------------------------------------------------------------
    # Factories (transient)
    # -------------------------------------------------------------------------

    def create_display_collection(self) -> DisplayCollection:
        """Create an empty display collection for one view."""
        return DisplayCollection()

    def create_scheduler(
        self,
        index_id: str,
        collection: Optional[DisplayCollection] = None,
        concurrency: Optional[int] = None,
    ) -> EnrichmentScheduler:
        """
        Create an enrichment scheduler for one index.

        Parameters
        ----------
        index_id : str
            The index to enrich.
        collection : DisplayCollection, optional
            Collection that receives enrichment results.
        concurrency : int, optional
            Overrides ``enrichment_concurrency``.

        Returns
        -------
        EnrichmentScheduler
            A scheduler wired to the shared client, classifier and tracker.
        """
        if not index_id:
            raise ConfigurationError(
                "No index ID given and none configured",
                setting_name="content_index_id",
            )
        client = self.twelvelabs_client
        return EnrichmentScheduler(
            tag_generator=client,
            metadata_store=client,
            index_id=index_id,
            tracker=self.state_tracker,
            collection=collection,
            classifier=self.hashtag_classifier,
            ingestion_status=client,
            listing=client,
            concurrency=concurrency or self.settings.enrichment_concurrency,
            cooldown=self.settings.enrichment_cooldown_seconds,
            completeness_fields=self.settings.enrichment_completeness_fields,
            require_ready_status=self.settings.enrichment_require_ready_status,
            call_timeout=self.settings.enrichment_call_timeout,
        )

    def reset(self) -> None:
        """Clear all cached singletons."""
        properties_to_clear = [
            "twelvelabs_client",
            "keyword_dictionary",
            "hashtag_classifier",
            "state_tracker",
        ]
        for prop in properties_to_clear:
            self.__dict__.pop(prop, None)


# Global container instance
container = Container()
