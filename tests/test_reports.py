"""Tests for report persistence."""
import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from scorecard.database.reports import ReportRepository
from scorecard.models import EvaluationMetadata, EvaluationReport, PoliticianScore

EVALUATED_AT = datetime(2024, 12, 31, tzinfo=timezone.utc)


class FakeCursor:
    def __init__(self, documents):
        self.documents = documents

    def sort(self, *args, **kwargs):
        return self

    def limit(self, count):
        self.documents = self.documents[:count]
        return self

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for document in self.documents:
            yield document


@pytest.fixture
def report(subject):
    return EvaluationReport(
        politician=subject,
        score=PoliticianScore(
            politician_id=subject.id,
            overall_score=42.0,
            confidence=0.5,
            evaluation_date=EVALUATED_AT,
        ),
        evaluation_metadata=EvaluationMetadata(
            total_data_points=0,
            evaluation_duration=0.1,
            last_updated=EVALUATED_AT,
        ),
    )


def stored(report):
    document = report.model_dump(mode="json")
    document.update(_id="abc", politician_id=report.politician.id, evaluated_at=EVALUATED_AT)
    return document


def test_save_upserts_on_subject_and_timestamp(report):
    collection = MagicMock()
    collection.update_one = AsyncMock(return_value=MagicMock(upserted_id="new-id"))
    repository = ReportRepository(collection)

    assert asyncio.run(repository.save(report)) is True

    key, update = collection.update_one.call_args.args
    assert key == {"politician_id": "D000001", "evaluated_at": EVALUATED_AT}
    assert update["$set"]["score"]["overall_score"] == 42.0
    assert collection.update_one.call_args.kwargs == {"upsert": True}


def test_save_existing_report_is_an_update(report):
    collection = MagicMock()
    collection.update_one = AsyncMock(return_value=MagicMock(upserted_id=None))

    assert asyncio.run(ReportRepository(collection).save(report)) is False


def test_latest_round_trips_the_report(report):
    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=stored(report))

    latest = asyncio.run(ReportRepository(collection).latest("D000001"))

    assert latest == report
    assert collection.find_one.call_args.kwargs["sort"] == [("evaluated_at", -1)]


def test_latest_missing(report):
    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=None)
    assert asyncio.run(ReportRepository(collection).latest("nobody")) is None


def test_history(report):
    collection = MagicMock()
    collection.find = MagicMock(return_value=FakeCursor([stored(report), stored(report)]))

    history = asyncio.run(ReportRepository(collection).history("D000001", limit=1))

    assert history == [report]
    collection.find.assert_called_once_with({"politician_id": "D000001"})
