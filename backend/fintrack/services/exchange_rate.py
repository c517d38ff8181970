from __future__ import annotations
"""
Exchange Rate Service
Fetches rates into the base currency from the Frankfurter API
API: https://api.frankfurter.app/latest?from=USD&to=INR
"""

import httpx
from datetime import date
from typing import Dict, Optional
import logging

from fintrack.core.config import settings
from fintrack.core.errors import UpstreamError, ValidationFailed

logger = logging.getLogger(__name__)


class ExchangeRateService:
    """Per-day cached rates of foreign currencies into the base currency"""

    def __init__(
        self,
        base_currency: Optional[str] = None,
        api_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_currency = (base_currency or settings.base_currency).upper()
        self.api_url = api_url or settings.exchange_rate_api_url
        self._transport = transport
        self._rates_cache: Dict[str, float] = {}
        self._cache_date: Optional[date] = None

    async def get_rate(self, currency: str, force_refresh: bool = False) -> float:
        """
        Rate for 1 unit of `currency` expressed in the base currency.
        The base currency itself is always 1.0.
        """
        currency = currency.strip().upper()
        if len(currency) != 3 or not currency.isalpha():
            raise ValidationFailed("currency must be a 3-letter code")
        if currency == self.base_currency:
            return 1.0

        today = date.today()
        if self._cache_date != today:
            self._rates_cache = {}
            self._cache_date = today

        if not force_refresh and currency in self._rates_cache:
            return self._rates_cache[currency]

        rate = await self._fetch(currency)
        self._rates_cache[currency] = rate
        return rate

    async def _fetch(self, currency: str) -> float:
        params = {"from": currency, "to": self.base_currency}
        try:
            async with httpx.AsyncClient(
                timeout=settings.exchange_rate_timeout,
                transport=self._transport
            ) as client:
                response = await client.get(self.api_url, params=params)
                response.raise_for_status()
                data = response.json()
                rate = float(data["rates"][self.base_currency])
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Failed to fetch {currency}->{self.base_currency} rate: {e}")
            raise UpstreamError("Failed to fetch exchange rate") from e

        logger.info(f"Fetched {currency}->{self.base_currency} rate: {rate}")
        return rate


# Singleton instance
_exchange_rate_service: Optional[ExchangeRateService] = None


def get_exchange_rate_service() -> ExchangeRateService:
    """Get or create exchange rate service singleton"""
    global _exchange_rate_service
    if _exchange_rate_service is None:
        _exchange_rate_service = ExchangeRateService()
    return _exchange_rate_service
