"""Resolution pipeline for broken URLs.

This module provides the ResolutionPipeline class that coordinates the two
sweeps of a run:

1. Status sweep: probe every reported URL in bounded batches and store
   its status and redirect target.
2. Resolution sweep: for every URL that still errors, pick the URL to
   match on (re-probing redirect targets once), classify it, find the
   closest reference code and store a redirect proposal.
"""

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Optional, Protocol, runtime_checkable

from redirectfinder.core.constants import (
    DEFAULTS,
    ERROR_STATUS_THRESHOLD,
    NOT_FOUND_STATUS,
    ResolutionOutcome,
    UrlCategory,
)
from redirectfinder.core.exceptions import PipelineError
from redirectfinder.core.models import (
    ErrorRecord,
    ProbeResult,
    ProbeSummary,
    RedirectRecord,
    ReferenceCode,
    ResolutionSummary,
)
from redirectfinder.classifier.classifier import URLClassifier
from redirectfinder.matching.selector import CodeIndex
from redirectfinder.orchestrator.scheduler import BatchScheduler, TaskOutcome
from redirectfinder.prober.prober import StatusProber


logger = logging.getLogger(__name__)


@runtime_checkable
class RedirectStore(Protocol):
    """Protocol for the persistent store used by the pipeline."""

    def upsert_urls(self, urls: Sequence[str]) -> int:
        ...

    def update_status(self, url: str, status: int, final_url: Optional[str] = None) -> None:
        ...

    def query_by_min_status(self, threshold: int) -> list[ErrorRecord]:
        ...

    def query_all_codes(self, category: UrlCategory) -> list[ReferenceCode]:
        ...

    def insert_redirects(self, records: Sequence[RedirectRecord]) -> int:
        ...

    def query_redirects_by_min_percent(self, min_percent: float) -> list[RedirectRecord]:
        ...


class ResolutionPipeline:
    """Orchestrates status probing and redirect resolution.

    The store and prober are injected; the pipeline holds no global state.
    Store errors propagate and abort the current sweep, everything that
    goes wrong for a single URL is counted and skipped.

    Example:
        >>> async with HttpxTransport() as transport:
        ...     pipeline = ResolutionPipeline(db, StatusProber(transport))
        ...     await pipeline.status_sweep(urls)
        ...     summary = await pipeline.resolution_sweep()
    """

    def __init__(
        self,
        store: RedirectStore,
        prober: StatusProber,
        *,
        classifier: Optional[URLClassifier] = None,
        scheduler: Optional[BatchScheduler] = None,
        base_url: Optional[str] = None,
        probe_log_every: int = DEFAULTS["probe_log_every"],
        resolve_log_every: int = DEFAULTS["resolve_log_every"],
    ) -> None:
        """Initialize resolution pipeline.

        Args:
            store: Persistent store for statuses, codes and redirects
            prober: Status prober for both sweeps
            classifier: URL classifier (created if not provided)
            scheduler: Batch scheduler (created with defaults if not provided)
            base_url: Site root for redirect targets; defaults to the
                origin of each failing URL
            probe_log_every: Log status sweep progress every N probes
            resolve_log_every: Log resolution progress every N records
        """
        self.store = store
        self.prober = prober
        self.classifier = classifier or URLClassifier()
        self.scheduler = scheduler or BatchScheduler()
        self.base_url = base_url.rstrip("/") if base_url else None
        self.probe_log_every = probe_log_every
        self.resolve_log_every = resolve_log_every
        self._running = False

    # ------------------------------------------------------------------
    # Full run
    # ------------------------------------------------------------------

    async def run(self, urls: Sequence[str], *, check_status: bool = True) -> ResolutionSummary:
        """Run both sweeps.

        Args:
            urls: Failing URLs reported by the site
            check_status: Whether to run the status sweep first

        Returns:
            ResolutionSummary of the resolution sweep
        """
        if check_status:
            await self.status_sweep(urls)
        else:
            self.store.upsert_urls(urls)
            logger.info("Status sweep skipped")
        return await self.resolution_sweep()

    # ------------------------------------------------------------------
    # Status sweep
    # ------------------------------------------------------------------

    async def status_sweep(self, urls: Sequence[str]) -> ProbeSummary:
        """Probe every URL and store the outcome.

        URLs without any HTTP response are counted as failed and left
        without a status; they are not retried.

        Args:
            urls: URLs to probe (duplicates are probed once)

        Returns:
            ProbeSummary with success and failure counts

        Raises:
            PipelineError: If the pipeline is already running
            StorageError: If the store fails
        """
        unique_urls = list(dict.fromkeys(urls))
        summary = ProbeSummary(total=len(unique_urls))

        with self._exclusive():
            self.store.upsert_urls(unique_urls)
            logger.info(f"Starting status sweep for {summary.total} URLs")

            def persist(outcomes: list[TaskOutcome[str, ProbeResult]]) -> None:
                for outcome in outcomes:
                    result = outcome.result
                    if result is not None and result.status is not None:
                        self.store.update_status(result.url, result.status, result.final_url)
                        summary.succeeded += 1
                    else:
                        summary.failed += 1

                    done = summary.succeeded + summary.failed
                    if self.probe_log_every and done % self.probe_log_every == 0:
                        logger.info(f"Probed {done}/{summary.total} URLs")

            await self.scheduler.run(unique_urls, self.prober.probe, on_batch_done=persist)

        logger.info(
            f"Status sweep finished. Succeeded: {summary.succeeded}, failed: {summary.failed}"
        )
        return summary

    # ------------------------------------------------------------------
    # Resolution sweep
    # ------------------------------------------------------------------

    async def resolution_sweep(self) -> ResolutionSummary:
        """Resolve every erroring URL to a redirect proposal.

        Returns:
            ResolutionSummary with counters and the produced redirects

        Raises:
            PipelineError: If the pipeline is already running
            StorageError: If the store fails
        """
        summary = ResolutionSummary()

        with self._exclusive():
            errors = self.store.query_by_min_status(ERROR_STATUS_THRESHOLD)
            indexes = {
                category: CodeIndex(self.store.query_all_codes(category))
                for category in UrlCategory
            }

            logger.info(f"Error records with status >= {ERROR_STATUS_THRESHOLD}: {len(errors)}")
            for category, index in indexes.items():
                logger.info(f"Reference codes for {category.value}: {len(index)}")

            reprobes = await self._reprobe_redirects(errors)

            for position, record in enumerate(errors, start=1):
                match_url = self._choose_match_url(record, reprobes, summary)
                if match_url is None:
                    outcome = ResolutionOutcome.SKIPPED_HEALTHY
                else:
                    outcome = self._resolve(record, match_url, indexes, summary)
                logger.debug(f"{record.url}: {outcome.value}")

                if self.resolve_log_every and position % self.resolve_log_every == 0:
                    logger.info(
                        f"Resolved {position}/{len(errors)} records, "
                        f"redirects found: {len(summary.redirects)}"
                    )

            if summary.redirects:
                self.store.insert_redirects(summary.redirects)

        logger.info(
            f"Resolution sweep finished. Processed: {summary.processed}, "
            f"redirects: {summary.matches} (products: {summary.product_matches}, "
            f"catalog: {summary.catalog_matches}), skipped: {summary.skipped}"
        )
        return summary

    async def _reprobe_redirects(self, errors: list[ErrorRecord]) -> dict[str, ProbeResult]:
        """Probe every distinct redirect target once.

        Args:
            errors: Error records, some with a final_url

        Returns:
            Mapping of final_url to its probe result
        """
        targets = list(dict.fromkeys(r.final_url for r in errors if r.final_url))
        if not targets:
            return {}

        logger.info(f"Re-probing {len(targets)} redirect targets")
        outcomes = await self.scheduler.run(targets, self.prober.probe)

        return {
            outcome.item: outcome.result if outcome.result is not None else ProbeResult(url=outcome.item)
            for outcome in outcomes
        }

    def _choose_match_url(
        self,
        record: ErrorRecord,
        reprobes: dict[str, ProbeResult],
        summary: ResolutionSummary,
    ) -> Optional[str]:
        """Pick the URL whose code is matched, or None to skip the record.

        A record without a redirect chain is matched on its own URL. A
        record whose redirect target is healthy needs no redirect. Any
        other redirect target is matched on instead of the original URL.
        """
        if not record.final_url:
            return record.url

        reprobe = reprobes.get(record.final_url, ProbeResult(url=record.final_url))

        if reprobe.status == NOT_FOUND_STATUS:
            self.store.update_status(record.final_url, reprobe.status, reprobe.final_url)
            summary.redirected_to_404 += 1
            return record.final_url

        if reprobe.status is not None and reprobe.status < ERROR_STATUS_THRESHOLD:
            summary.skipped_healthy += 1
            return None

        return record.final_url

    def _resolve(
        self,
        record: ErrorRecord,
        match_url: str,
        indexes: dict[UrlCategory, CodeIndex],
        summary: ResolutionSummary,
    ) -> ResolutionOutcome:
        """Classify match_url and record a redirect for the original URL."""
        classification = self.classifier.classify(match_url)

        if classification.decode_failed:
            summary.skipped_decode += 1
            return ResolutionOutcome.SKIPPED_DECODE

        if not classification.is_resolvable:
            summary.skipped_unclassified += 1
            return ResolutionOutcome.SKIPPED_UNCLASSIFIED

        category = classification.category
        summary.processed += 1
        candidate = indexes[category].best_match(classification.code)

        if candidate is None:
            summary.skipped_no_match += 1
            return ResolutionOutcome.SKIPPED_NO_MATCH

        summary.redirects.append(RedirectRecord(
            source=record.url,
            target=self.build_target(record.url, category, candidate.code),
            percent=candidate.percent,
        ))
        summary.record_match(category)
        return ResolutionOutcome.MATCHED

    def build_target(self, source_url: str, category: UrlCategory, code: str) -> str:
        """Build the absolute URL of a reference code.

        Args:
            source_url: Failing URL, whose origin is used without a base URL
            category: Category of the matched code
            code: Matched reference code

        Returns:
            URL of the form <base>/<category>/<code>
        """
        base = self.base_url or self.classifier.normalizer.get_origin(source_url) or ""
        return f"{base}/{category.value}/{code}"

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        """Mark the pipeline as running for the duration of a sweep."""
        if self._running:
            raise PipelineError("Pipeline is already running")
        self._running = True
        try:
            yield
        finally:
            self._running = False
