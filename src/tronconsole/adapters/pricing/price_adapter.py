from __future__ import annotations

from decimal import Decimal
from typing import Optional

from tronconsole.ports.price_port import PricePort
from tronconsole.config import settings


class FixedPriceAdapter(PricePort):
    """TRX/USD from configuration; there is no live price source."""

    def __init__(self, trx_usd: Optional[Decimal] = None) -> None:
        self._trx_usd = settings.TRX_USD_PRICE if trx_usd is None else Decimal(trx_usd)

    def get_trx_usd_price(self) -> Decimal:
        return self._trx_usd
