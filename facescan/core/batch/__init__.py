"""
Resumable batch comparison engine.

Exports:
  - BatchOrchestrator: Tick state machine (bootstrap / continue / complete)
  - merge_results: Idempotent result merger
  - encode_token, decode_token: Continuation token codec
  - TimeBudget: Per-tick soft deadline
  - Domain models and collaborator protocols

Dependencies: pydantic, facescan.configs
System role: Core engine walking a remote image set across stateless invocations
"""

from facescan.core.batch.merger import merge_results
from facescan.core.batch.models import (
    ComparisonOutcome,
    ComparisonResult,
    ContinuationState,
    JobRecord,
    JobStatus,
    ProcessingProgress,
    ReferenceHandle,
    RemoteItem,
    TickResult,
)
from facescan.core.batch.orchestrator import BatchOrchestrator
from facescan.core.batch.ports import CollectionLister, Comparator, JobStore, ReferenceStore
from facescan.core.batch.time_budget import TimeBudget
from facescan.core.batch.token_codec import decode_token, encode_token

__all__ = [
    "BatchOrchestrator",
    "CollectionLister",
    "Comparator",
    "ComparisonOutcome",
    "ComparisonResult",
    "ContinuationState",
    "JobRecord",
    "JobStatus",
    "JobStore",
    "ProcessingProgress",
    "ReferenceHandle",
    "ReferenceStore",
    "RemoteItem",
    "TickResult",
    "TimeBudget",
    "decode_token",
    "encode_token",
    "merge_results",
]
