from datetime import datetime
from uuid import UUID
import os

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.dependencies import require_audit_viewer
from core.database import get_db
from schemas.audit_log import AuditLogListResponse, AuditPruneResponse
from services.audit_service import AuditService

router = APIRouter(prefix="/admin/audit", tags=["audit"], dependencies=[Depends(require_audit_viewer)])


def _max_limit() -> int:
    return int(os.getenv("AUDIT_LOG_MAX_LIMIT", "200"))


@router.get("/logs", response_model=AuditLogListResponse)
def list_audit_logs(
    db: Session = Depends(get_db),
    limit: int = Query(default=50, ge=1),
    offset: int = Query(default=0, ge=0),
    level: str | None = Query(default=None),
    category: str | None = Query(default=None),
    action: str | None = Query(default=None),
    actor_email: str | None = Query(default=None),
    project_code: str | None = Query(default=None),
    load_id: UUID | None = Query(default=None),
    from_time: datetime | None = Query(default=None),
    to_time: datetime | None = Query(default=None),
):
    bounded_limit = min(limit, _max_limit())
    total, logs = AuditService.list_logs(
        db,
        limit=bounded_limit,
        offset=offset,
        level=level,
        category=category,
        action=action,
        actor_email=actor_email,
        project_code=project_code,
        load_id=load_id,
        from_time=from_time,
        to_time=to_time,
    )

    return {
        "total": total,
        "count": len(logs),
        "logs": [
            {
                "id": item.id,
                "reference": item.reference,
                "event_time": item.event_time,
                "level": item.level,
                "category": item.category,
                "action": item.action,
                "message": item.message,
                "actor_id": item.actor_id,
                "actor_email": item.actor_email,
                "actor_role": item.actor_role,
                "load_id": item.load_id,
                "project_code": item.project_code,
                "truck_id": item.truck_id,
                "metadata": item.metadata_dict,
            }
            for item in logs
        ],
    }


@router.post("/prune", response_model=AuditPruneResponse)
def prune_audit_logs(db: Session = Depends(get_db)):
    """Delete entries older than AUDIT_LOG_RETENTION_DAYS."""
    deleted = AuditService.prune_old_logs(db)
    return {"deleted": deleted}
