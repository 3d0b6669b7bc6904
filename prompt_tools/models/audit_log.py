import uuid

from sqlalchemy import JSON, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from .base import UUIDModel


class AuditLog(UUIDModel):
    __tablename__ = "audit_logs"

    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    action_type: Mapped[str] = mapped_column(String(50), nullable=False)  # CREATE, UPDATE, DELETE, ...
    resource_type: Mapped[str] = mapped_column(String(50), nullable=False)  # PROMPT, VERSION
    resource_id: Mapped[uuid.UUID | None] = mapped_column(nullable=True)
    old_data: Mapped[dict | None] = mapped_column(JSON().with_variant(JSONB, "postgresql"), nullable=True)
    new_data: Mapped[dict | None] = mapped_column(JSON().with_variant(JSONB, "postgresql"), nullable=True)
    # created_at from base gives audit timestamp
