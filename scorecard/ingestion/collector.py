"""
Evidence collection across all configured sources.

Sources are queried concurrently for one subject. A failing source
contributes nothing and is marked unavailable; the evaluation only fails when
no source answers at all.
"""
import asyncio
import logging
from typing import Dict, Iterable, List, Sequence, Tuple

from scorecard.errors import NoDataAvailable, RateLimited
from scorecard.ingestion.base import Record, SourceClient
from scorecard.models import CampaignPromise, EvidenceSet, LegislativeAction, Subject, TimeRange
from scorecard.models.evidence import citation_count

logger = logging.getLogger(__name__)


def _preference(record: Record) -> tuple:
    # More citations first, then a fixed order so ties resolve the same way
    # regardless of which source answered first.
    return (-citation_count(record), record.source, record.id)


def merge_evidence(batches: Iterable[Sequence[Record]]) -> Tuple[List[LegislativeAction], List[CampaignPromise]]:
    """
    Merge records from several sources, keeping one record per natural key.

    The result depends only on the set of records, not on the order in which
    batches arrive.
    """
    chosen: Dict[tuple, Record] = {}
    for batch in batches:
        for record in batch:
            key = record.natural_key
            current = chosen.get(key)
            if current is None or _preference(record) < _preference(current):
                chosen[key] = record

    ordered = sorted(chosen.values(), key=lambda r: (r.date, r.natural_key, r.source))
    actions = [r for r in ordered if isinstance(r, LegislativeAction)]
    promises = [r for r in ordered if isinstance(r, CampaignPromise)]
    return actions, promises


class DataCollector:
    """
    Fan-out over source clients with per-source failure isolation.

    Keeps the outcome of the latest query to each source for status reporting.
    """

    def __init__(self, clients: Sequence[SourceClient], source_timeout: float = 60.0):
        self.clients = list(clients)
        self.source_timeout = source_timeout
        self._availability: Dict[str, str] = {client.name: "unknown" for client in self.clients}
        self._last_errors: Dict[str, str] = {}

    @property
    def source_names(self) -> List[str]:
        return [client.name for client in self.clients]

    async def _fetch_one(self, client: SourceClient, subject: Subject, time_range: TimeRange):
        try:
            records = await asyncio.wait_for(
                client.fetch_evidence(subject, time_range),
                timeout=self.source_timeout,
            )
        except asyncio.TimeoutError as e:
            self._mark(client.name, f"timed out after {self.source_timeout}s")
            return client.name, e
        except Exception as e:
            self._mark(client.name, str(e))
            return client.name, e

        self._availability[client.name] = "available"
        self._last_errors.pop(client.name, None)
        return client.name, records

    def _mark(self, source: str, reason: str) -> None:
        self._availability[source] = "unavailable"
        self._last_errors[source] = reason
        logger.warning(f"Source {source} unavailable: {reason}")

    async def collect(self, subject: Subject, time_range: TimeRange) -> EvidenceSet:
        """
        Gather and merge evidence for one subject.

        Raises:
            RateLimited: If every source failed on its rate limit
            NoDataAvailable: If every source failed otherwise
        """
        if not self.clients:
            raise NoDataAvailable(f"No sources configured for {subject.id}")

        results = await asyncio.gather(
            *(self._fetch_one(client, subject, time_range) for client in self.clients)
        )

        batches = [outcome for _, outcome in results if not isinstance(outcome, BaseException)]
        failures = {name: outcome for name, outcome in results if isinstance(outcome, BaseException)}

        if not batches:
            if all(isinstance(error, RateLimited) for error in failures.values()):
                first = failures[sorted(failures)[0]]
                raise RateLimited(first.source, first.waited)
            raise NoDataAvailable(
                f"All sources failed for {subject.id}: {', '.join(sorted(failures))}"
            )

        actions, promises = merge_evidence(batches)
        logger.info(
            f"Collected {len(actions)} legislative actions and {len(promises)} promises "
            f"for {subject.id} ({len(batches)}/{len(self.clients)} sources answered)"
        )

        return EvidenceSet(
            legislative_actions=actions,
            campaign_promises=promises,
            sources_queried=sorted(self.source_names),
            unavailable_sources=sorted(failures),
        )

    def availability(self) -> Dict[str, dict]:
        return {
            name: {"status": status, "last_error": self._last_errors.get(name)}
            for name, status in self._availability.items()
        }
