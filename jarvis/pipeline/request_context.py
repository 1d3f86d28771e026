"""
Request context.

Carries request-scoped identity and pipeline progress. Passed
explicitly into the pipeline; nothing here is global.

Sandi Metz Principles:
- Single Responsibility: Request context tracking
- Clear lifecycle: Start to end tracking
"""

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from jarvis.utils.logger import get_logger

logger = get_logger(__name__)


class PipelineState(str, Enum):
    """States of one response pipeline run."""

    START = "start"
    CACHE_CHECK = "cache_check"
    HIT = "hit"
    MISS = "miss"
    GATHER_CONTEXT = "gather_context"
    BUILD_PROMPT = "build_prompt"
    COMPLETE = "complete"
    FORMAT = "format"
    STORE_CACHE = "store_cache"
    DONE = "done"
    FAILED = "failed"


@dataclass
class RequestContext:
    """
    Holds context for a single request.

    Identity fields are fixed at creation; state fields move forward
    as the pipeline runs.
    """

    request_id: str
    start_time: float
    query: str
    session_id: Optional[str] = None
    client_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    state: PipelineState = PipelineState.START
    transitions: List[PipelineState] = field(default_factory=lambda: [PipelineState.START])
    cache_hit: bool = False
    failed_in: Optional[PipelineState] = None
    error: Optional[str] = None
    end_time: Optional[float] = None

    @classmethod
    def create(
        cls,
        query: str,
        session_id: Optional[str] = None,
        client_id: Optional[str] = None,
        request_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "RequestContext":
        """
        Create new request context.

        Args:
            query: User message
            session_id: Optional session identifier
            client_id: Optional caller identity (session or address)
            request_id: Request ID (generated if None)
            metadata: Additional metadata

        Returns:
            New RequestContext
        """
        return cls(
            request_id=request_id or str(uuid.uuid4()),
            start_time=time.time(),
            query=query,
            session_id=session_id,
            client_id=client_id,
            metadata=metadata or {},
        )

    @property
    def elapsed_ms(self) -> float:
        """Get elapsed time in milliseconds."""
        end = self.end_time or time.time()
        return (end - self.start_time) * 1000

    @property
    def is_complete(self) -> bool:
        return self.end_time is not None

    def advance(self, state: PipelineState) -> None:
        """
        Record a state transition.

        Args:
            state: New state
        """
        self.state = state
        self.transitions.append(state)
        if state is PipelineState.HIT:
            self.cache_hit = True
        logger.debug("Pipeline state", request_id=self.request_id, state=state.value)

    def fail(self, error: Exception) -> None:
        """Mark the run as failed in its current state."""
        self.failed_in = self.state
        self.error = str(error)
        self.advance(PipelineState.FAILED)
        self.complete()

    def complete(self) -> None:
        """Mark request as complete."""
        if self.end_time is None:
            self.end_time = time.time()

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary.

        Returns:
            Context as dict
        """
        return {
            "request_id": self.request_id,
            "query": self.query[:100],
            "session_id": self.session_id,
            "client_id": self.client_id,
            "state": self.state.value,
            "transitions": [s.value for s in self.transitions],
            "cache_hit": self.cache_hit,
            "failed_in": self.failed_in.value if self.failed_in else None,
            "elapsed_ms": round(self.elapsed_ms, 2),
            "metadata": self.metadata,
        }
