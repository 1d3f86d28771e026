"""
Pipeline collaborators.

The pipeline reads local records and writes analytics and learning
records through these interfaces. The defaults here keep everything in
process and log through structlog.

Sandi Metz Principles:
- Dependency Inversion: Pipeline depends on protocols
- Small classes: One concern each
"""

import re
from typing import List, Optional, Protocol, Sequence

from pydantic import BaseModel, Field

from jarvis.models.query import LocalRecord, QueryAnalysis
from jarvis.utils.logger import get_logger

logger = get_logger(__name__)

QUERY_CHARS = 500
LEARNING_RESPONSE_CHARS = 1000

_WORD_PATTERN = re.compile(r"\w+", re.UNICODE)


class AnalyticsRecord(BaseModel):
    """One pipeline run, successful or not."""

    request_id: str
    session_id: Optional[str] = None
    query: str
    status: str = Field(..., description="success or failed")
    cache_hit: bool = False
    model: str = "unknown"
    tokens_used: int = 0
    elapsed_ms: float = 0.0
    response_length: int = 0
    error_category: Optional[str] = None
    error: Optional[str] = None
    query_type: Optional[str] = None
    query_category: Optional[str] = None


class LearningRecord(BaseModel):
    """A fresh query/answer pair worth learning from."""

    query: str
    response: str
    model: str
    topics: List[str] = Field(default_factory=list)


class LocalDataSource(Protocol):
    """Reads portfolio records relevant to a query."""

    async def find(
        self, message: str, analysis: QueryAnalysis, limit: int
    ) -> List[LocalRecord]: ...


class AnalyticsRecorder(Protocol):
    """Stores one record per pipeline run."""

    async def record(self, record: AnalyticsRecord) -> None: ...


class LearningRecorder(Protocol):
    """Stores fresh query/answer pairs."""

    async def record(self, record: LearningRecord) -> None: ...


class StaticLocalDataSource:
    """
    Local records held in memory, ranked by word overlap with the query.

    Records sharing no word with the message or topics are left out.
    """

    def __init__(self, records: Sequence[LocalRecord] = ()):
        self._records = list(records)

    async def find(
        self, message: str, analysis: QueryAnalysis, limit: int
    ) -> List[LocalRecord]:
        terms = _words(message) | {t.lower() for t in analysis.topics}
        scored = []
        for index, record in enumerate(self._records):
            score = len(terms & _words(f"{record.title} {record.description}"))
            if score:
                scored.append((-score, index, record))
        scored.sort()
        return [record for _, _, record in scored[:limit]]


class LoggingAnalyticsRecorder:
    """Writes analytics records as structured log lines."""

    async def record(self, record: AnalyticsRecord) -> None:
        payload = record.model_dump()
        payload["query"] = record.query[:QUERY_CHARS]
        logger.info("analytics", **payload)


class LoggingLearningRecorder:
    """Writes learning records as structured log lines."""

    async def record(self, record: LearningRecord) -> None:
        logger.info(
            "learning",
            query=record.query[:QUERY_CHARS],
            response=record.response[:LEARNING_RESPONSE_CHARS],
            model=record.model,
            topics=record.topics,
        )


def _words(text: str) -> set:
    return {w.lower() for w in _WORD_PATTERN.findall(text) if len(w) > 2}
