import httpx
import pytest

from fintrack.core.errors import UpstreamError, ValidationFailed
from fintrack.core.permissions import Role
from fintrack.services.exchange_rate import ExchangeRateService, get_exchange_rate_service
from main import app


def frankfurter(rate=83.25, calls=None, status_code=200):
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return httpx.Response(
            status_code,
            json={"amount": 1.0, "base": request.url.params["from"], "rates": {"INR": rate}},
        )
    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_rate_is_fetched_once_per_day():
    calls = []
    service = ExchangeRateService(transport=frankfurter(calls=calls))

    assert await service.get_rate("usd") == 83.25
    assert await service.get_rate("USD") == 83.25

    assert len(calls) == 1
    assert calls[0].url.params["from"] == "USD"
    assert calls[0].url.params["to"] == "INR"


@pytest.mark.asyncio
async def test_base_currency_needs_no_upstream_call():
    calls = []
    service = ExchangeRateService(transport=frankfurter(calls=calls))

    assert await service.get_rate("INR") == 1.0
    assert calls == []


@pytest.mark.asyncio
async def test_upstream_failure_raises():
    service = ExchangeRateService(transport=frankfurter(status_code=503))
    with pytest.raises(UpstreamError):
        await service.get_rate("EUR")


@pytest.mark.asyncio
async def test_invalid_currency_code():
    service = ExchangeRateService(transport=frankfurter())
    with pytest.raises(ValidationFailed):
        await service.get_rate("EURO")


@pytest.mark.asyncio
async def test_exchange_rate_endpoint(client, headers):
    app.dependency_overrides[get_exchange_rate_service] = lambda: ExchangeRateService(transport=frankfurter(rate=90.1))

    response = await client.get("/api/exchange-rate/eur", headers=headers[Role.DATA_ENTRY])
    assert response.status_code == 200
    assert response.json() == {"currency": "EUR", "rate": 90.1, "base": "INR"}


@pytest.mark.asyncio
async def test_exchange_rate_endpoint_upstream_error(client, headers):
    app.dependency_overrides[get_exchange_rate_service] = lambda: ExchangeRateService(
        transport=frankfurter(status_code=500)
    )

    response = await client.get("/api/exchange-rate/GBP", headers=headers[Role.ADMIN])
    assert response.status_code == 500
    assert response.json() == {"message": "Failed to fetch exchange rate"}
