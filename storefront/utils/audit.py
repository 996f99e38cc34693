# storefront/utils/audit.py
"""Audit trail: one ``logs`` row per account, checkout or catalog action.

Rows are committed immediately so a failed request still leaves its trace,
and each entry is echoed to the application log.
"""
import enum
import logging
from typing import Optional

from fastapi import Request
from sqlalchemy.orm import Session

from storefront.models.log import Log

logger = logging.getLogger(__name__)


class AuditStatus(str, enum.Enum):
    SUCCESS = "SUCCESS"
    FAIL = "FAIL"


def client_ip(request: Optional[Request]) -> Optional[str]:
    if request is None or request.client is None:
        return None
    return request.client.host


def audit(
    db: Session,
    request: Optional[Request],
    action: str,
    resource: str,
    *,
    user_id: Optional[int] = None,
    status: AuditStatus = AuditStatus.SUCCESS,
    **details,
) -> Log:
    status = AuditStatus(status)
    entry = Log(
        user_id=user_id,
        action=action,
        resource=resource,
        status=status.value,
        ip=client_ip(request),
        meta=details or None,
    )
    db.add(entry)
    db.commit()

    level = logging.INFO if status is AuditStatus.SUCCESS else logging.WARNING
    logger.log(level, "%s/%s %s (user %s)", resource, action, status.value, user_id)
    return entry
