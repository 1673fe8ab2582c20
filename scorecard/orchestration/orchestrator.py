"""
Evaluation orchestrator.

Drives one subject through collect -> score -> bias check -> assemble, and
runs batches of subjects with bounded concurrency and per-subject failure
isolation.

Usage:
    settings = load_settings()
    orchestrator = build_orchestrator(settings)
    report = await orchestrator.evaluate_subject(subject)
    reports = await orchestrator.evaluate_subjects([subject_a, subject_b])
    await orchestrator.aclose()
"""
import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

import httpx
from tenacity import AsyncRetrying, before_sleep_log, retry_if_exception, stop_after_attempt, wait_exponential

from scorecard.config.constants import CONGRESS_GOV, GOVTRACK, PROMISE_TRACKER
from scorecard.config.settings import Settings
from scorecard.database.reports import ReportRepository
from scorecard.errors import EvaluationTimeout
from scorecard.evaluation import BiasDetector, ScoringEngine
from scorecard.ingestion import (
    CongressGovClient,
    DataCollector,
    GovTrackClient,
    PromiseTrackerClient,
    RateLimiter,
    ResponseCache,
    SourceClient,
)
from scorecard.models import (
    BiasCheck,
    EvaluationMetadata,
    EvaluationReport,
    EvidenceSet,
    PoliticianScore,
    Subject,
    TimeRange,
    promise_fulfillment_rate,
)
from scorecard.orchestration.state_machine import (
    TERMINAL_STATES,
    EvaluationState,
    StepAction,
    StepFailed,
    StepSucceeded,
    initial_transition,
    is_retryable,
    transition,
)

logger = logging.getLogger(__name__)


SOURCE_CLIENTS = {
    CONGRESS_GOV: CongressGovClient,
    GOVTRACK: GovTrackClient,
    PROMISE_TRACKER: PromiseTrackerClient,
}


@dataclass
class EvaluationRun:
    """Intermediate state of one subject evaluation."""
    subject: Subject
    time_range: TimeRange
    started: float
    state: EvaluationState = EvaluationState.COLLECTING
    evidence: Optional[EvidenceSet] = None
    score: Optional[PoliticianScore] = None
    bias_checks: List[BiasCheck] = field(default_factory=list)
    report: Optional[EvaluationReport] = None


@dataclass
class SubjectOutcome:
    """Success-with-report or failure-with-reason for one batch item."""
    subject_id: str
    report: Optional[EvaluationReport] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.report is not None


@dataclass
class BatchResult:
    outcomes: List[SubjectOutcome]

    @property
    def reports(self) -> List[EvaluationReport]:
        return [outcome.report for outcome in self.outcomes if outcome.succeeded]

    @property
    def failures(self) -> List[SubjectOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.succeeded]

    @property
    def success_count(self) -> int:
        return len(self.reports)

    @property
    def total(self) -> int:
        return len(self.outcomes)


class EvaluationOrchestrator:
    """
    Sequences the evaluation steps for each subject.

    Holds the collaborators it needs; the rate limiter and response cache
    inside the collector's clients are shared by every evaluation.
    """

    def __init__(
        self,
        settings: Settings,
        collector: DataCollector,
        engine: ScoringEngine,
        detector: BiasDetector,
        limiter: RateLimiter,
        cache: ResponseCache,
        report_store: Optional[ReportRepository] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.settings = settings
        self.collector = collector
        self.engine = engine
        self.detector = detector
        self.limiter = limiter
        self.cache = cache
        self.report_store = report_store
        self.http_client = http_client
        self._now = now

        self._steps: Dict[StepAction, Callable[[EvaluationRun], Awaitable[None]]] = {
            StepAction.COLLECT: self._collect,
            StepAction.SCORE: self._score,
            StepAction.CHECK_BIAS: self._check_bias,
            StepAction.ASSEMBLE: self._assemble,
        }

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _collect(self, run: EvaluationRun) -> None:
        run.evidence = await self.collector.collect(run.subject, run.time_range)

    async def _score(self, run: EvaluationRun) -> None:
        run.score = self.engine.score(run.subject.id, run.evidence, evaluated_at=self._now())

    async def _check_bias(self, run: EvaluationRun) -> None:
        review = self.detector.review(run.score, run.evidence, run.time_range)
        run.score = review.score
        run.bias_checks = review.checks

    async def _assemble(self, run: EvaluationRun) -> None:
        evidence = run.evidence
        score = run.score
        meets_threshold = score.confidence >= self.settings.CONFIDENCE_THRESHOLD
        if not meets_threshold:
            logger.warning(
                f"Low confidence for {run.subject.id}: {score.confidence:.2f} "
                f"< {self.settings.CONFIDENCE_THRESHOLD} ({score.data_points} data points)"
            )

        answered = [s for s in evidence.sources_queried if s not in evidence.unavailable_sources]
        run.report = EvaluationReport(
            politician=run.subject,
            score=score,
            legislative_actions=evidence.legislative_actions,
            campaign_promises=evidence.campaign_promises,
            promise_fulfillment_rate=promise_fulfillment_rate(evidence.campaign_promises),
            data_sources=answered,
            evaluation_metadata=EvaluationMetadata(
                total_data_points=len(evidence),
                evaluation_duration=time.perf_counter() - run.started,
                bias_checks=run.bias_checks,
                last_updated=self._now(),
                meets_confidence_threshold=meets_threshold,
                unavailable_sources=evidence.unavailable_sources,
            ),
        )

        if self.report_store is not None:
            try:
                await self.report_store.save(run.report)
            except Exception as e:
                logger.error(f"Could not persist report for {run.subject.id}: {e}", exc_info=True)

    async def _run_step(self, action: StepAction, run: EvaluationRun) -> None:
        step = self._steps[action]
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.settings.STEP_RETRY_ATTEMPTS),
            wait=wait_exponential(multiplier=self.settings.RETRY_BACKOFF_SECONDS, max=30),
            retry=retry_if_exception(is_retryable),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                await step(run)

    # ------------------------------------------------------------------
    # Single subject
    # ------------------------------------------------------------------

    async def _evaluate(self, subject: Subject, time_range: TimeRange) -> EvaluationReport:
        run = EvaluationRun(subject=subject, time_range=time_range, started=time.perf_counter())
        step = initial_transition()

        while step.state not in TERMINAL_STATES:
            run.state = step.state
            try:
                await self._run_step(step.action, run)
                event = StepSucceeded()
            except Exception as e:
                event = StepFailed(e)

            step = transition(step.state, event, self.settings.BIAS_DETECTION_ENABLED)
            if step.state == EvaluationState.FAILED:
                logger.error(f"Evaluation of {subject.id} failed while {run.state.value}: {event.error}")
                raise event.error

        run.state = step.state
        return run.report

    async def evaluate_subject(self, subject: Subject, time_range: Optional[TimeRange] = None) -> EvaluationReport:
        """
        Evaluate one subject.

        Raises:
            NoDataAvailable: If no source answered
            RateLimited: If sources stayed rate limited through the retries
            EvaluationTimeout: If the evaluation exceeded its time budget
        """
        time_range = time_range or TimeRange.last_days(now=self._now())
        logger.info(f"Starting evaluation for {subject}...")

        try:
            report = await asyncio.wait_for(
                self._evaluate(subject, time_range),
                timeout=self.settings.EVALUATION_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError as e:
            raise EvaluationTimeout(
                f"Evaluation of {subject.id} exceeded {self.settings.EVALUATION_TIMEOUT_SECONDS}s"
            ) from e

        logger.info(
            f"Evaluation completed for {subject.name}: overall {report.score.overall_score:.2f}, "
            f"confidence {report.score.confidence:.1%}"
        )
        return report

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    async def evaluate_batch(
        self, subjects: Sequence[Subject], time_range: Optional[TimeRange] = None
    ) -> BatchResult:
        """Evaluate every subject; one subject's failure never affects another."""
        logger.info(f"Starting batch evaluation for {len(subjects)} politicians...")
        time_range = time_range or TimeRange.last_days(now=self._now())
        semaphore = asyncio.Semaphore(self.settings.MAX_CONCURRENT_EVALUATIONS)

        async def run_one(subject: Subject) -> SubjectOutcome:
            async with semaphore:
                try:
                    report = await self.evaluate_subject(subject, time_range)
                except Exception as e:
                    return SubjectOutcome(subject_id=subject.id, error=str(e), error_type=type(e).__name__)
                return SubjectOutcome(subject_id=subject.id, report=report)

        outcomes = await asyncio.gather(*(run_one(subject) for subject in subjects))
        result = BatchResult(outcomes=list(outcomes))

        logger.info(f"Batch evaluation completed. {result.success_count}/{result.total} successful.")
        return result

    async def evaluate_subjects(
        self, subjects: Sequence[Subject], time_range: Optional[TimeRange] = None
    ) -> List[EvaluationReport]:
        """Reports for the subjects that evaluated successfully, in input order."""
        result = await self.evaluate_batch(subjects, time_range)
        return result.reports

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    def status(self) -> dict:
        return {
            "per_source_availability": self.collector.availability(),
            "cache_stats": self.cache.stats(),
            "rate_limiter_stats": self.limiter.stats(),
        }

    async def aclose(self) -> None:
        if self.http_client is not None:
            await self.http_client.aclose()


def build_clients(
    settings: Settings,
    limiter: RateLimiter,
    cache: ResponseCache,
    http_client: Optional[httpx.AsyncClient] = None,
) -> List[SourceClient]:
    """One client per enabled source; sources missing a required key are skipped."""
    clients: List[SourceClient] = []
    keys = settings.api_keys_by_source

    for name in settings.ENABLED_SOURCES:
        client_cls = SOURCE_CLIENTS.get(name)
        if client_cls is None:
            logger.warning(f"Unknown source '{name}' in ENABLED_SOURCES, skipping")
            continue
        if client_cls.requires_api_key and not keys.get(name):
            logger.warning(f"No API key configured for {name}, skipping")
            continue
        clients.append(client_cls(
            limiter=limiter,
            cache=cache,
            api_key=keys.get(name),
            http_client=http_client,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        ))

    return clients


def build_orchestrator(
    settings: Settings,
    http_client: Optional[httpx.AsyncClient] = None,
    report_store: Optional[ReportRepository] = None,
    clients: Optional[Sequence[SourceClient]] = None,
    limiter: Optional[RateLimiter] = None,
    cache: Optional[ResponseCache] = None,
) -> EvaluationOrchestrator:
    """Wire every collaborator once from a single Settings object."""
    limiter = limiter or RateLimiter.from_settings(settings)
    cache = cache or ResponseCache.from_settings(settings)
    if http_client is None and clients is None:
        http_client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)
    if clients is None:
        clients = build_clients(settings, limiter, cache, http_client)
    if report_store is None and settings.MONGODB_URI:
        report_store = ReportRepository.from_settings(settings)

    engine = ScoringEngine(settings)
    return EvaluationOrchestrator(
        settings=settings,
        collector=DataCollector(clients, source_timeout=settings.SOURCE_TIMEOUT_SECONDS),
        engine=engine,
        detector=BiasDetector(settings, engine),
        limiter=limiter,
        cache=cache,
        report_store=report_store,
        http_client=http_client,
    )
