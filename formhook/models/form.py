"""
Form model.

Only the owner (user_id from the JWT) may read or change a form through
the admin API. Public endpoints never expose the webhook fields.
"""
import uuid
from typing import Any
from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from formhook.models.base import Base, TimestampMixin


class Form(Base, TimestampMixin):
    """
    A published form and its webhook target.

    webhook_config is stored as submitted by the form editor: either a
    JSON object or a JSON-encoded string. It is normalized at dispatch time.
    """
    __tablename__ = "forms"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    fields: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    settings: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    webhook_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    webhook_config: Mapped[Any | None] = mapped_column(JSON, nullable=True)

    @property
    def is_active(self) -> bool:
        """Forms accept submissions unless settings.isActive is explicitly false."""
        return (self.settings or {}).get("isActive", True) is not False

    def __repr__(self):
        return f"<Form(id={self.id}, title={self.title}, webhook_url={self.webhook_url})>"
