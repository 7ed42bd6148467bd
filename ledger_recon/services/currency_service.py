"""
Currency service — exchange rates and conversion.

Rates are quoted against one base currency (AED by default): a
row (USD, 2025-10-01, 3.67) means one USD is worth 3.67 AED from
that day until the next USD rate. Converting between two non-base
currencies goes through the base currency.
"""

import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_recon.config import get_settings
from ledger_recon.models.exchange_rate import ExchangeRate
from ledger_recon.schemas.rates import ExchangeRateCreate
from ledger_recon.services.exceptions import RateUnavailable, ValidationError

logger = logging.getLogger(__name__)

# Matches the Numeric(19, 4) scale of stored amounts
AMOUNT_PLACES = Decimal("0.0001")


class RateProvider(Protocol):
    def rate_as_of(self, currency: str, as_of: date) -> Decimal | None:
        """Latest rate for `currency` at or before `as_of`, or None."""
        ...


class SqlRateProvider:
    """Reads rates from the exchange_rates table."""

    def __init__(self, db: Session):
        self.db = db

    def rate_as_of(self, currency: str, as_of: date) -> Decimal | None:
        return self.db.execute(
            select(ExchangeRate.rate)
            .where(
                ExchangeRate.currency == currency,
                ExchangeRate.as_of <= as_of,
            )
            .order_by(ExchangeRate.as_of.desc())
            .limit(1)
        ).scalar_one_or_none()


class CurrencyNormalizer:
    """
    Converts amounts into an account's ledger currency.

    One normalizer serves one request: rate lookups are memoized
    per (currency, day) for its lifetime.
    """

    def __init__(self, provider: RateProvider, base_currency: str | None = None):
        self.provider = provider
        self.base_currency = (
            base_currency or get_settings().BASE_CURRENCY
        ).upper()
        self._cache: dict[tuple[str, date], Decimal | None] = {}

    def _rate(self, currency: str, as_of: date) -> Decimal:
        if currency == self.base_currency:
            return Decimal("1")
        key = (currency, as_of)
        if key not in self._cache:
            self._cache[key] = self.provider.rate_as_of(currency, as_of)
        rate = self._cache[key]
        if rate is None or rate <= 0:
            raise RateUnavailable(currency, as_of)
        return Decimal(rate)

    def convert(
        self,
        amount: Decimal,
        source_currency: str,
        ledger_currency: str,
        as_of: date,
    ) -> Decimal:
        """
        Convert `amount` from source_currency into ledger_currency.

        Same currency returns the amount untouched: no lookup and no
        rounding. Otherwise the result is rounded half-up to four
        places. Raises RateUnavailable when either side has no rate.
        """
        if source_currency == ledger_currency:
            return amount

        source_rate = self._rate(source_currency, as_of)
        ledger_rate = self._rate(ledger_currency, as_of)
        converted = amount * source_rate / ledger_rate
        return converted.quantize(AMOUNT_PLACES, rounding=ROUND_HALF_UP)


class CurrencyService:
    """Maintains the exchange rate book."""

    def __init__(self, db: Session):
        self.db = db
        self.base_currency = get_settings().BASE_CURRENCY

    def record_rate(self, request: ExchangeRateCreate) -> ExchangeRate:
        """
        Record the rate for a currency on a day.

        Raises ValidationError for the base currency or if a rate
        already exists for that currency and day.
        """
        currency = request.currency.upper()
        if currency == self.base_currency:
            raise ValidationError(
                f"{currency} is the base currency; its rate is always 1"
            )

        existing = self.db.execute(
            select(ExchangeRate).where(
                ExchangeRate.currency == currency,
                ExchangeRate.as_of == request.as_of,
            )
        ).scalar_one_or_none()
        if existing:
            raise ValidationError(
                f"Rate for {currency} on {request.as_of.isoformat()} "
                f"already exists"
            )

        rate = ExchangeRate(
            currency=currency,
            as_of=request.as_of,
            rate=request.rate,
        )
        self.db.add(rate)
        self.db.flush()
        logger.info(f"Recorded rate {currency}={request.rate} as of {request.as_of}")
        return rate

    def list_rates(self, currency: str | None = None) -> list[ExchangeRate]:
        """Rates newest first, optionally for one currency."""
        stmt = select(ExchangeRate).order_by(
            ExchangeRate.currency, ExchangeRate.as_of.desc()
        )
        if currency:
            stmt = stmt.where(ExchangeRate.currency == currency.upper())
        return list(self.db.execute(stmt).scalars().all())
