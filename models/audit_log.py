from datetime import datetime
import json
import uuid

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.dialects.postgresql import UUID

from core.database import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)  # type: ignore
    reference = Column(String(40), unique=True, index=True, nullable=False)  # type: ignore
    event_time = Column(DateTime, default=datetime.utcnow, index=True, nullable=False)  # type: ignore
    level = Column(String(16), index=True, nullable=False, default="INFO")  # type: ignore
    category = Column(String(64), index=True, nullable=False, default="loads")  # type: ignore
    action = Column(String(160), nullable=False)  # type: ignore
    message = Column(Text, nullable=True)  # type: ignore

    actor_id = Column(UUID(as_uuid=True), nullable=True)  # type: ignore
    actor_email = Column(String(255), index=True, nullable=True)  # type: ignore
    actor_role = Column(String(16), index=True, nullable=True)  # type: ignore

    load_id = Column(UUID(as_uuid=True), index=True, nullable=True)  # type: ignore
    project_code = Column(String(20), index=True, nullable=True)  # type: ignore
    truck_id = Column(String(50), nullable=True)  # type: ignore
    metadata_json = Column(Text, nullable=True)  # type: ignore

    @property
    def metadata_dict(self) -> dict:
        raw_text = str(getattr(self, "metadata_json", None) or "")
        if not raw_text:
            return {}
        try:
            payload = json.loads(raw_text)
        except ValueError:
            return {}
        return payload if isinstance(payload, dict) else {}
