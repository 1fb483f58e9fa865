"""
Configuration Store

Admin-editable pricing configuration, pay rates and the service task
catalog. Every read returns a fresh snapshot that callers pass explicitly
into the engines.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.models.settings_document import ConfigDocument, ServiceTask
from engines.schemas.payroll import PayRates
from engines.schemas.pricing import PricingConfig, TaskCategory, TaskDefinition
from engines.services.task_catalog import DEFAULT_TASKS, TaskCatalog

logger = logging.getLogger(__name__)

PRICING_CONFIG_KEY = "pricing_config"
PAY_RATES_KEY = "pay_rates"


def _to_definition(row: ServiceTask) -> TaskDefinition:
    return TaskDefinition(
        id=row.task_key,
        name=row.name,
        included_minutes=row.included_minutes,
        category=TaskCategory(row.category),
        is_active=row.is_active,
    )


class ConfigStore:
    """Reads and writes configuration through an async session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_document(self, key: str) -> dict | None:
        doc = await self.db.get(ConfigDocument, key)
        return dict(doc.value) if doc is not None else None

    async def _put_document(self, key: str, value: dict, updated_by: str | None) -> None:
        doc = await self.db.get(ConfigDocument, key)
        if doc is None:
            self.db.add(ConfigDocument(key=key, value=value, updated_by=updated_by))
        else:
            doc.value = value
            doc.updated_by = updated_by
        await self.db.flush()

    # ── Pricing ─────────────────────────────────

    async def get_pricing_config(self) -> PricingConfig:
        data = await self._get_document(PRICING_CONFIG_KEY)
        return PricingConfig.model_validate(data or {})

    async def save_pricing_config(self, data: dict, updated_by: str | None = None) -> PricingConfig:
        """
        Validate and persist a pricing configuration.

        Bounded overtime fields are clamped by the model, so the stored
        document is the clamped one.
        """
        config = PricingConfig.model_validate(data)
        await self._put_document(PRICING_CONFIG_KEY, config.model_dump(mode="json"), updated_by)
        logger.info(
            f"Pricing config saved by {updated_by or 'system'}: "
            f"grace={config.overtime_grace_minutes} block={config.overtime_block_minutes} "
            f"rate={config.overtime_rate_percentage}% rules={len(config.surge_rules)}"
        )
        return config

    # ── Pay rates ───────────────────────────────

    async def get_pay_rates(self) -> PayRates:
        data = await self._get_document(PAY_RATES_KEY)
        return PayRates.model_validate(data or {})

    async def save_pay_rates(self, data: dict, updated_by: str | None = None) -> PayRates:
        rates = PayRates.model_validate(data)
        await self._put_document(PAY_RATES_KEY, rates.model_dump(mode="json"), updated_by)
        logger.info(f"Pay rates saved by {updated_by or 'system'}")
        return rates

    # ── Task catalog ────────────────────────────

    async def get_task_catalog(self) -> TaskCatalog:
        """Catalog from the service_tasks table; built-in defaults when empty."""
        result = await self.db.execute(select(ServiceTask).order_by(ServiceTask.task_key))
        rows = result.scalars().all()
        if not rows:
            return TaskCatalog(DEFAULT_TASKS)
        return TaskCatalog(_to_definition(row) for row in rows)

    async def seed_default_tasks(self) -> int:
        """Insert the built-in tasks that are not in the table yet."""
        result = await self.db.execute(select(ServiceTask.task_key))
        existing = set(result.scalars().all())
        added = 0
        for task in DEFAULT_TASKS:
            if task.id in existing:
                continue
            self.db.add(
                ServiceTask(
                    task_key=task.id,
                    name=task.name,
                    included_minutes=task.included_minutes,
                    category=task.category.value,
                    is_active=task.is_active,
                )
            )
            added += 1
        await self.db.flush()
        return added

    async def upsert_task(self, task: TaskDefinition) -> TaskDefinition:
        await self.seed_default_tasks()
        result = await self.db.execute(select(ServiceTask).where(ServiceTask.task_key == task.id))
        row = result.scalar_one_or_none()
        if row is None:
            row = ServiceTask(task_key=task.id)
            self.db.add(row)
        row.name = task.name
        row.included_minutes = task.included_minutes
        row.category = task.category.value
        row.is_active = task.is_active
        await self.db.flush()
        logger.info(f"Service task {task.id} saved (active={task.is_active})")
        return _to_definition(row)

    async def disable_task(self, task_id: str) -> TaskDefinition | None:
        """Soft-disable a task. Returns None for an unknown id."""
        await self.seed_default_tasks()
        result = await self.db.execute(select(ServiceTask).where(ServiceTask.task_key == task_id))
        row = result.scalar_one_or_none()
        if row is None:
            return None
        row.is_active = False
        await self.db.flush()
        logger.info(f"Service task {task_id} disabled")
        return _to_definition(row)
