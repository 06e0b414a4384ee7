"""
Ingestion worker API models.

Dataclasses for the trigger/cancel request and response bodies, plus the
status vocabulary the worker uses in its callbacks.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class WorkerJobStatus(str, Enum):
    """Status values the worker reports through the status webhook."""
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["WorkerJobStatus"]:
        """Parse a reported status string, returning None when unrecognized."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


@dataclass
class TriggerRequest:
    """Body of POST {base_url}/ingestion/trigger."""
    job_id: str
    job_type: str
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jobId": self.job_id,
            "type": self.job_type,
            "payload": self.payload,
        }


@dataclass
class TriggerResponse:
    """Worker acknowledgement of a trigger request."""
    external_job_id: Optional[str]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TriggerResponse":
        job_id = data.get("jobId")
        if job_id is not None and not isinstance(job_id, str):
            job_id = str(job_id)
        return cls(external_job_id=job_id or None)
