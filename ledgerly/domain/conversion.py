"""Conversion of record amounts into the reporting currency"""

import logging
from decimal import Decimal

from ledgerly.domain.exceptions import RateNotFound, RatesUnavailable
from ledgerly.domain.models import BASE_CURRENCY, MonetaryRecord
from ledgerly.domain.rates import RateResolver

logger = logging.getLogger(__name__)


class TransactionNormalizer:
    """
    Converts record amounts with the resolver's rates.

    A failed lookup never aborts a report: the amount is used as-is (factor 1)
    and the failure is logged. `fallbacks` counts how often that happened.
    """

    def __init__(self, resolver: RateResolver):
        self.resolver = resolver
        self.fallbacks = 0

    def normalize(self, record: MonetaryRecord, reporting_currency: str) -> Decimal:
        currency = record.currency or BASE_CURRENCY
        if currency == reporting_currency:
            return record.amount

        try:
            factor = self.resolver.rate(currency, reporting_currency)
        except (RatesUnavailable, RateNotFound) as e:
            self.fallbacks += 1
            logger.warning(
                f"Exchange rate conversion error for {currency}: {e}",
                extra={"step": "normalize", "currency": currency, "reporting_currency": reporting_currency},
            )
            factor = Decimal(1)

        return record.amount * factor
