"""
Webhook Log Model

One immutable row per outbound delivery attempt.
"""
from typing import Any
from sqlalchemy import JSON, Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from formhook.models.base import Base, CreatedAtMixin


class WebhookLog(Base, CreatedAtMixin):
    """Webhook delivery attempt log. Append-only."""
    __tablename__ = "webhook_logs"

    # Autoincrement id doubles as the insertion sequence
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    submission_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("submissions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    request_url: Mapped[str] = mapped_column(Text, nullable=False)
    request_body: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    request_headers: Mapped[dict[str, str] | None] = mapped_column(JSON, nullable=True)
    response_status: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # 0 = no response
    response_body: Mapped[str | None] = mapped_column(Text, nullable=True)
    attempt_number: Mapped[int] = mapped_column(Integer, nullable=False)
    successful: Mapped[bool] = mapped_column(Boolean, nullable=False)

    def __repr__(self):
        return (
            f"<WebhookLog(id={self.id}, submission_id={self.submission_id}, "
            f"attempt={self.attempt_number}, successful={self.successful})>"
        )
