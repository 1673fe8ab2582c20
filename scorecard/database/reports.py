"""
Evaluation report persistence.

Usage:
    repository = ReportRepository.from_settings(settings)
    await repository.save(report)
    latest = await repository.latest("L000577")
"""
import logging
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorCollection

from scorecard.config.constants import COLLECTION_EVALUATION_REPORTS
from scorecard.config.settings import Settings
from scorecard.database.connection import get_async_database
from scorecard.models import EvaluationReport

logger = logging.getLogger(__name__)


class ReportRepository:
    """Upserts reports keyed by subject id and evaluation timestamp."""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    @classmethod
    def from_settings(cls, settings: Settings) -> "ReportRepository":
        db = get_async_database(settings)
        return cls(db[COLLECTION_EVALUATION_REPORTS])

    @staticmethod
    def _key(report: EvaluationReport) -> dict:
        return {
            "politician_id": report.politician.id,
            "evaluated_at": report.score.evaluation_date,
        }

    async def save(self, report: EvaluationReport) -> bool:
        """
        Upsert one report.

        Returns:
            True if new insert, False if update
        """
        document = report.model_dump(mode="json")
        document.update(self._key(report))

        result = await self.collection.update_one(
            self._key(report),
            {"$set": document},
            upsert=True
        )
        logger.info(f"Saved evaluation report for {report.politician.id}")
        return result.upserted_id is not None

    async def latest(self, politician_id: str) -> Optional[EvaluationReport]:
        document = await self.collection.find_one(
            {"politician_id": politician_id},
            sort=[("evaluated_at", -1)],
        )
        if document is None:
            return None
        return self._to_report(document)

    async def history(self, politician_id: str, limit: int = 20) -> List[EvaluationReport]:
        cursor = self.collection.find({"politician_id": politician_id}).sort("evaluated_at", -1).limit(limit)
        return [self._to_report(document) async for document in cursor]

    @staticmethod
    def _to_report(document: dict) -> EvaluationReport:
        payload = {k: v for k, v in document.items() if k not in ("_id", "politician_id", "evaluated_at")}
        return EvaluationReport.model_validate(payload)
