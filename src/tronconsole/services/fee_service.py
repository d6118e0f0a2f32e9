from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Dict, Tuple

from tronconsole.config import settings
from tronconsole.core.dto import FeeEstimate
from tronconsole.core.enums import Network
from tronconsole.ports.chain_gateway_port import ChainGatewayPort
from tronconsole.ports.price_port import PricePort

CENTS = Decimal("0.01")


class FeeKind(str, Enum):
    DEPLOY = "deploy"
    TRANSFER = "transfer"
    MINT_BURN = "mint_burn"


RESOURCES: Dict[FeeKind, Tuple[int, int]] = {
    FeeKind.DEPLOY: settings.DEPLOY_RESOURCES,
    FeeKind.TRANSFER: settings.TRANSFER_RESOURCES,
    FeeKind.MINT_BURN: settings.MINT_BURN_RESOURCES,
}


class FeeService:
    """
    Rough TRX cost of an operation: typical energy/bandwidth usage times the
    live per-unit prices, plus a per-network margin. An estimate, not a
    simulation; the real cost depends on execution.
    """

    def __init__(self, price: PricePort) -> None:
        self.price = price

    def estimate(self, chain: ChainGatewayPort, network: Network, kind: FeeKind) -> FeeEstimate:
        energy, bandwidth = RESOURCES[kind]
        params = chain.get_chain_fee_params()

        energy_trx = Decimal(energy * params.energy_fee_sun) / settings.SUN_PER_TRX
        bandwidth_trx = Decimal(bandwidth * params.transaction_fee_sun) / settings.SUN_PER_TRX
        margin = settings.SAFETY_MARGIN[network.value]

        total_trx = ((energy_trx + bandwidth_trx) * margin).quantize(CENTS, rounding=ROUND_HALF_UP)
        usd = (total_trx * self.price.get_trx_usd_price()).quantize(CENTS, rounding=ROUND_HALF_UP)

        return FeeEstimate(
            energy_required=energy,
            bandwidth_required=bandwidth,
            estimated_trx_cost=total_trx,
            estimated_usd_cost=usd,
        )
