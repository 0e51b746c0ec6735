"""Approval workflow: storage, transitions, side effects and audit."""

from __future__ import annotations

from .approval import ApprovalProcessor
from .audit import AuditLogger
from .payloads import (
    BrandCreate,
    ChangePayload,
    CommodityEnrichment,
    PriceObservationCreate,
    decode_change,
)
from .service import approve_workflow, reject_workflow, request_change
from .workflow_store import WorkflowStore

__all__ = [
    "ApprovalProcessor",
    "AuditLogger",
    "BrandCreate",
    "ChangePayload",
    "CommodityEnrichment",
    "PriceObservationCreate",
    "WorkflowStore",
    "approve_workflow",
    "decode_change",
    "reject_workflow",
    "request_change",
]
