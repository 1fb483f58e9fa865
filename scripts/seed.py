"""
Seed Script

Populates the database with reference and demo data for development:
the service task catalog, a pricing configuration with sample surge
windows, default pay rates, and a few demo bookings on the job board.

Usage:
    python -m scripts.seed
"""

import asyncio
from datetime import date, time, timedelta

from backend.db.session import get_async_session
from backend.services.booking_service import BookingRequest, BookingService
from backend.services.config_store import ConfigStore
from backend.services.notifications import LoggingNotifier
from backend.services.shift_lifecycle import ShiftLifecycleManager

SURGE_RULES = [
    {
        "id": "evening",
        "name": "Evening Visits",
        "multiplier": "1.15",
        "start_time": "18:00",
        "end_time": "22:00",
    },
    {
        "id": "weekend",
        "name": "Weekend Premium",
        "multiplier": "1.10",
        "days_of_week": [0, 6],
        "stackable": True,
    },
    {
        "id": "holidays",
        "name": "Holiday Season",
        "multiplier": "1.50",
        "start_date": f"{date.today().year}-12-24",
        "end_date": f"{date.today().year}-12-26",
    },
]

DEMO_BOOKINGS = [
    {
        "client_id": "demo-client-1",
        "client_name": "Margaret Chen",
        "client_email": "margaret.chen@example.com",
        "service_address": "12 King St W, Toronto, ON",
        "postal_code": "M5H 1A1",
        "task_ids": ["personal-care", "meal-prep"],
        "start": time(9, 0),
        "end": time(11, 0),
    },
    {
        "client_id": "demo-client-2",
        "client_name": "David Okafor",
        "client_email": "d.okafor@example.com",
        "patient_name": "Grace Okafor",
        "service_address": "480 University Ave, Toronto, ON",
        "postal_code": "M5G 1V2",
        "task_ids": ["hospital-visit"],
        "start": time(13, 30),
        "end": time(15, 0),
    },
    {
        "client_id": "demo-client-3",
        "client_name": "Helen Moreau",
        "client_email": "helen.moreau@example.com",
        "service_address": "77 Bloor St W, Toronto, ON",
        "postal_code": "M5S 1M2",
        "task_ids": ["doctor-escort", "transportation"],
        "start": time(18, 30),
        "end": time(20, 30),
    },
]


async def seed():
    """Create reference and demo data."""
    async with get_async_session() as db:
        store = ConfigStore(db)

        # ── Task catalog ──────────────────────────────────
        added = await store.seed_default_tasks()

        # ── Pricing and pay rates ─────────────────────────
        config = await store.save_pricing_config({"surge_rules": SURGE_RULES}, updated_by="seed")
        rates = await store.save_pay_rates({}, updated_by="seed")
        await db.commit()

        # ── Demo bookings ─────────────────────────────────
        notifier = LoggingNotifier()
        service = BookingService(db, ShiftLifecycleManager(db, notifier=notifier), notifier=notifier)
        tomorrow = date.today() + timedelta(days=1)
        totals = []
        for demo in DEMO_BOOKINGS:
            booking = await service.create_booking(
                BookingRequest(
                    client_id=demo["client_id"],
                    client_name=demo["client_name"],
                    client_email=demo["client_email"],
                    patient_name=demo.get("patient_name"),
                    service_address=demo["service_address"],
                    postal_code=demo["postal_code"],
                    task_ids=demo["task_ids"],
                    scheduled_date=tomorrow,
                    scheduled_start=demo["start"],
                    scheduled_end=demo["end"],
                )
            )
            totals.append(f"{booking.client_name}: ${booking.total} ({booking.category})")

        print(f"Service tasks added: {added}")
        print(f"Surge rules: {len(config.surge_rules)}")
        print(f"Pay rates: standard ${rates.standard}, doctor ${rates.doctor}, hospital ${rates.hospital}")
        print(f"Demo bookings for {tomorrow.isoformat()}:")
        for line in totals:
            print(f"  {line}")


if __name__ == "__main__":
    asyncio.run(seed())
