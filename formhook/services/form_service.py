"""
Form service.

SECURITY: Admin routes must check form.user_id against the requesting
user before returning or changing a form. Public routes must not expose
webhook fields.
"""
from typing import Any
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from formhook.models.form import Form


class FormService:
    """Service for managing forms."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_form(
        self,
        user_id: str,
        title: str,
        description: str | None = None,
        fields: list[Any] | None = None,
        settings: dict[str, Any] | None = None,
        webhook_url: str | None = None,
        webhook_config: Any = None
    ) -> Form:
        """
        Create a new form.

        Args:
            user_id: Owner of the form
            title: Form title
            description: Optional description
            fields: Field definitions from the builder
            settings: Display/behaviour settings
            webhook_url: Optional webhook target
            webhook_config: Optional webhook auth/retry config

        Returns:
            Newly created Form
        """
        form = Form(
            user_id=user_id,
            title=title,
            description=description,
            fields=fields or [],
            settings=settings or {},
            webhook_url=webhook_url,
            webhook_config=webhook_config
        )
        self.db.add(form)
        await self.db.commit()
        await self.db.refresh(form)
        return form

    async def get_form(self, form_id: str) -> Form | None:
        """Get form by ID."""
        stmt = select(Form).where(Form.id == form_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_forms(self, user_id: str) -> list[Form]:
        """Get all forms owned by a user, newest first."""
        stmt = select(Form).where(Form.user_id == user_id).order_by(Form.created_at.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def update_form(self, form: Form, **changes: Any) -> Form:
        """Apply field changes to a form. Unknown attributes are ignored."""
        for key, value in changes.items():
            if hasattr(Form, key) and key not in ("id", "user_id", "created_at", "updated_at"):
                setattr(form, key, value)
        await self.db.commit()
        await self.db.refresh(form)
        return form

    async def set_webhook(self, form: Form, url: str, config: Any = None) -> Form:
        """Point a form at a webhook URL with the given config."""
        return await self.update_form(form, webhook_url=url, webhook_config=config)

    async def clear_webhook(self, form: Form) -> Form:
        """Remove webhook delivery from a form."""
        return await self.update_form(form, webhook_url=None, webhook_config=None)
