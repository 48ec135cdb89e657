"""
Submission model.

A submission's webhook fields are written only through
SubmissionService.update_submission_webhook_status.
"""
import uuid
import enum
from typing import Any
from sqlalchemy import JSON, String, Text, Integer, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from formhook.models.base import Base, CreatedAtMixin


class WebhookStatus(str, enum.Enum):
    """Webhook delivery status of a submission."""
    PENDING = "pending"
    RETRYING = "retrying"
    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"
    ERROR = "error"


class Submission(Base, CreatedAtMixin):
    """One response to a form."""
    __tablename__ = "submissions"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )
    form_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("forms.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    webhook_status: Mapped[WebhookStatus] = mapped_column(
        SQLEnum(
            WebhookStatus,
            native_enum=False,
            length=20,
            values_callable=lambda statuses: [s.value for s in statuses]
        ),
        nullable=False,
        default=WebhookStatus.PENDING
    )
    webhook_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    webhook_response: Mapped[str | None] = mapped_column(Text, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self):
        return f"<Submission(id={self.id}, form_id={self.form_id}, webhook_status={self.webhook_status})>"
