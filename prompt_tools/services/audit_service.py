from __future__ import annotations

import logging
import uuid
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from prompt_tools.models.audit_log import AuditLog

logger = logging.getLogger("prompt_tools.services.audit")


def log_prompt_event(
    db: Session,
    *,
    user_id: str,
    action_type: str,
    resource_id: Optional[uuid.UUID],
    resource_type: str = "PROMPT",
    old_data: Optional[dict[str, Any]] = None,
    new_data: Optional[dict[str, Any]] = None,
) -> AuditLog:
    log = AuditLog(
        user_id=user_id,
        action_type=action_type,
        resource_type=resource_type,
        resource_id=resource_id,
        old_data=old_data,
        new_data=new_data,
    )
    try:
        db.add(log)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to write audit log: action=%s resource=%s", action_type, resource_id)
        raise
    return log
