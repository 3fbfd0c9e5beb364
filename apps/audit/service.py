import logging
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from common.context import ActorContext
from models.audit_log import AuditLog

logger = logging.getLogger(__name__)


def _jsonable(value: Any) -> Any:
    # Decimals, enums and datetimes are stored as their string form.
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return str(getattr(value, "value", value))


class AuditLogService:
    @staticmethod
    def log_action(
        db: AsyncSession,
        ctx: ActorContext,
        action: str,
        entity_type: str,
        entity_id: Optional[int],
        details: Optional[Dict[str, Any]] = None,
    ) -> AuditLog:
        """
        Add an AuditLog row to the caller's session.
        The caller owns the transaction: the entry commits or rolls back with the change it describes.
        """
        entry = AuditLog(
            org_id=ctx.org_id,
            user_id=ctx.user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=_jsonable(details) if details else None,
        )
        db.add(entry)
        logger.debug("audit %s %s#%s by user %s", action, entity_type, entity_id, ctx.user_id)
        return entry
