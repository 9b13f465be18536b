from __future__ import annotations

import json
import os
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from models.audit_log import AuditLog
from models.load import Load


class AuditService:
    LEVELS = {"DEBUG", "INFO", "WARN", "ERROR", "CRITICAL"}

    @staticmethod
    def generate_reference(at_time: datetime | None = None) -> str:
        timestamp = (at_time or datetime.utcnow()).strftime("%Y%m%d")
        return f"AUD-{timestamp}-{uuid4().hex[:8].upper()}"

    @staticmethod
    def _safe_level(level: str | None) -> str:
        normalized = (level or "INFO").strip().upper()
        return normalized if normalized in AuditService.LEVELS else "INFO"

    @staticmethod
    def _actor_id(actor: Any) -> UUID | None:
        actor_id = getattr(actor, "id", None)
        if actor_id is None or isinstance(actor_id, UUID):
            return actor_id
        return UUID(str(actor_id))

    @staticmethod
    def _actor_role(actor: Any) -> str | None:
        role = getattr(actor, "role", None)
        if role is None:
            return None
        return str(role.value if hasattr(role, "value") else role)

    @staticmethod
    def record_load_event(
        db: Session,
        *,
        action: str,
        load: Load,
        actor: Any = None,
        message: str | None = None,
        level: str = "INFO",
        metadata: dict | None = None,
    ) -> AuditLog:
        """Stage an audit row in the caller's transaction; it is written with the load mutation."""
        entry = AuditLog(
            reference=AuditService.generate_reference(),
            level=AuditService._safe_level(level),
            category="inventory" if load.is_inventory else "loads",
            action=action,
            message=message,
            actor_id=AuditService._actor_id(actor),
            actor_email=getattr(actor, "email", None),
            actor_role=AuditService._actor_role(actor),
            load_id=load.id,
            project_code=load.project_code,
            truck_id=load.truck_id,
            metadata_json=json.dumps(metadata or {}, default=str),
        )
        db.add(entry)
        return entry

    @staticmethod
    def prune_old_logs(db: Session) -> int:
        retention_days = int(os.getenv("AUDIT_LOG_RETENTION_DAYS", "180"))
        cutoff = datetime.utcnow() - timedelta(days=retention_days)

        deleted = db.query(AuditLog).filter(AuditLog.event_time < cutoff).delete()  # type: ignore[arg-type]
        db.commit()
        return int(deleted or 0)

    @staticmethod
    def list_logs(
        db: Session,
        *,
        limit: int,
        offset: int,
        level: str | None = None,
        category: str | None = None,
        action: str | None = None,
        actor_email: str | None = None,
        project_code: str | None = None,
        load_id: Any = None,
        from_time: datetime | None = None,
        to_time: datetime | None = None,
    ) -> tuple[int, list[AuditLog]]:
        query = db.query(AuditLog)

        if level:
            query = query.filter(AuditLog.level == level.strip().upper())
        if category:
            query = query.filter(AuditLog.category == category.strip().lower())
        if action:
            query = query.filter(AuditLog.action == action.strip())
        if actor_email:
            query = query.filter(AuditLog.actor_email.ilike(f"%{actor_email.strip()}%"))
        if project_code:
            query = query.filter(AuditLog.project_code == project_code.strip())
        if load_id is not None:
            query = query.filter(AuditLog.load_id == load_id)
        if from_time is not None:
            query = query.filter(AuditLog.event_time >= from_time)
        if to_time is not None:
            query = query.filter(AuditLog.event_time <= to_time)

        total = query.count()
        logs = query.order_by(AuditLog.event_time.desc()).offset(offset).limit(limit).all()
        return total, logs


__all__ = ["AuditService"]
