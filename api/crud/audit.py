import uuid
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from api.models import AuditLog


def record(
    session: AsyncSession,
    action: str,
    entity: str,
    entity_id: Optional[uuid.UUID],
    payload: Dict[str, Any],
    actor: str = "system",
) -> AuditLog:
    entry = AuditLog(actor=actor, action=action, entity=entity, entity_id=entity_id, payload_json=payload)
    session.add(entry)
    return entry
