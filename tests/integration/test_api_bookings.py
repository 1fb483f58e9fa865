"""
Integration Tests for Quote and Booking Endpoints

Tests pricing, booking creation, ownership and cancellation through the
API with identity headers per role.
"""

import pytest
from httpx import AsyncClient

from backend.middleware.rbac import Role
from tests.factories import identity_headers

QUOTES = "/api/v1/quotes"
BOOKINGS = "/api/v1/bookings"


def _booking_body(**overrides) -> dict:
    body = {
        "client_name": "Margaret Chen",
        "client_email": "margaret@example.com",
        "service_address": "12 King St W, Toronto",
        "postal_code": "M5H 1A1",
        "task_ids": ["personal-care"],
        "scheduled_date": "2030-06-03",
        "scheduled_start": "09:00:00",
        "scheduled_end": "10:00:00",
    }
    body.update(overrides)
    return body


class TestQuotes:

    @pytest.mark.asyncio
    async def test_quote_personal_care(self, client: AsyncClient, client_headers):
        response = await client.post(QUOTES, json={"task_ids": ["personal-care"]}, headers=client_headers)

        assert response.status_code == 200
        quote = response.json()["quote"]
        assert quote["total"] == "39.55"
        assert quote["hst_amount"] == "4.55"
        assert quote["category"] == "standard"

    @pytest.mark.asyncio
    async def test_quote_asap(self, client: AsyncClient, client_headers):
        response = await client.post(
            QUOTES, json={"task_ids": ["personal-care"], "is_asap": True}, headers=client_headers
        )

        assert response.json()["quote"]["total"] == "49.44"

    @pytest.mark.asyncio
    async def test_empty_selection_returns_null_quote(self, client: AsyncClient, client_headers):
        response = await client.post(QUOTES, json={"task_ids": []}, headers=client_headers)

        assert response.status_code == 200
        assert response.json()["quote"] is None

    @pytest.mark.asyncio
    async def test_quote_requires_identity(self, client: AsyncClient):
        response = await client.post(QUOTES, json={"task_ids": ["personal-care"]})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_psw_cannot_quote(self, client: AsyncClient, psw_headers):
        response = await client.post(QUOTES, json={"task_ids": ["personal-care"]}, headers=psw_headers)

        assert response.status_code == 403


class TestBookings:

    @pytest.mark.asyncio
    async def test_create_booking(self, client: AsyncClient, client_headers, notifier):
        response = await client.post(BOOKINGS, json=_booking_body(), headers=client_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["client_id"] == "client-1"
        assert data["status"] == "pending"
        assert data["payment_status"] == "invoice-pending"
        assert data["total"] == "39.55"
        assert notifier.events() == ["booking_confirmed"]

    @pytest.mark.asyncio
    async def test_outside_service_area_rejected(self, client: AsyncClient, client_headers):
        response = await client.post(BOOKINGS, json=_booking_body(within_coverage=False), headers=client_headers)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_empty_window_rejected(self, client: AsyncClient, client_headers):
        response = await client.post(
            BOOKINGS, json=_booking_body(scheduled_end="09:00:00"), headers=client_headers
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_clients_only_see_their_own_bookings(self, client: AsyncClient, client_headers, admin_headers):
        created = (await client.post(BOOKINGS, json=_booking_body(), headers=client_headers)).json()
        other = identity_headers(Role.CLIENT, "client-2", "Someone Else")

        assert (await client.get(f"{BOOKINGS}/{created['id']}", headers=other)).status_code == 404
        assert (await client.get(BOOKINGS, headers=other)).json()["total"] == 0
        assert (await client.get(f"{BOOKINGS}/{created['id']}", headers=admin_headers)).status_code == 200

    @pytest.mark.asyncio
    async def test_cancel_well_ahead_is_refund_eligible(self, client: AsyncClient, client_headers):
        created = (await client.post(BOOKINGS, json=_booking_body(), headers=client_headers)).json()

        response = await client.post(f"{BOOKINGS}/{created['id']}/cancel", headers=client_headers)

        assert response.status_code == 200
        assert response.json()["refund_eligible"] is True

        again = await client.post(f"{BOOKINGS}/{created['id']}/cancel", headers=client_headers)
        assert again.status_code == 409
