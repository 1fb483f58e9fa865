"""
Configuration Models

Admin-editable configuration: JSON documents keyed by name, and the
service task catalog.
"""

from uuid import UUID, uuid4

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from backend.models.base import Base, JSONType, TimestampMixin


class ConfigDocument(TimestampMixin, Base):
    """
    A named configuration document.

    Known keys: pricing_config, pay_rates.
    """

    __tablename__ = "settings_documents"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[dict] = mapped_column(JSONType, default=dict, nullable=False)
    updated_by: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
        comment="Admin user id of the last save",
    )

    def __repr__(self) -> str:
        return f"<ConfigDocument(key={self.key})>"


class ServiceTask(TimestampMixin, Base):
    """
    Billable task type.

    Tasks are soft-disabled (is_active = false), never deleted, because
    historical shifts reference them.
    """

    __tablename__ = "service_tasks"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    task_key: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        comment="Stable task id referenced by bookings (e.g. 'personal-care')",
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    included_minutes: Mapped[int] = mapped_column(nullable=False)
    category: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="standard|hospital|doctor",
    )
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<ServiceTask(key={self.task_key}, active={self.is_active})>"
