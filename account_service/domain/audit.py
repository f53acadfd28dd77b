"""Structured audit entries emitted after a business action completes."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from pydantic import BaseModel, Field

audit_logger = logging.getLogger("account_service.audit")


class AuditRecord(BaseModel):
    action: str
    result_type: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    context: dict[str, Any] = Field(default_factory=dict)


AuditSink = Callable[[AuditRecord], None]


def log_audit_record(record: AuditRecord) -> None:
    """Default sink: write the record as a single JSON line on the audit logger."""
    audit_logger.info("%s", record.model_dump_json())
