"""Audit trail subscriber — persists every SystemEvent to the audit_log table.

Registered as a global subscriber at startup. Failures are logged and
swallowed: a broken audit write must never fail the request that caused it.
"""

from __future__ import annotations

import logging

from devispro.db.engine import async_session_factory
from devispro.models.audit import AuditLog
from devispro.schemas.events import SystemEvent

logger = logging.getLogger(__name__)


async def audit_on_event(event: SystemEvent) -> None:
    """Write a SystemEvent to the audit_log table."""
    try:
        async with async_session_factory() as db:
            db.add(AuditLog(
                event_type=event.event_type.value,
                entity_type=event.entity_type,
                entity_id=event.entity_id,
                actor_id=event.actor_id,
                data=event.model_dump(mode="json")["data"],
            ))
            await db.commit()
    except Exception:
        logger.exception(
            "Failed to persist audit event: %s (%s=%s)",
            event.event_type.value,
            event.entity_type,
            event.entity_id,
        )
