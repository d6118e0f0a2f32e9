import unittest
from decimal import Decimal

from tronconsole.adapters.chain.static_chain_adapter import StaticChainAdapter
from tronconsole.adapters.pricing.price_adapter import FixedPriceAdapter
from tronconsole.core.dto import ChainFeeParams
from tronconsole.core.enums import Network
from tronconsole.services.fee_service import FeeKind, FeeService


class FeeServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.chain = StaticChainAdapter(fee_params=ChainFeeParams(420, 1000))
        self.fees = FeeService(FixedPriceAdapter(Decimal("0.25")))

    def test_deploy_on_testnet(self) -> None:
        fee = self.fees.estimate(self.chain, Network.TESTNET, FeeKind.DEPLOY)

        self.assertEqual(fee.energy_required, 65000)
        self.assertEqual(fee.bandwidth_required, 350)
        self.assertEqual(fee.estimated_trx_cost, Decimal("30.42"))
        self.assertEqual(fee.estimated_usd_cost, Decimal("7.61"))

    def test_mainnet_uses_larger_margin(self) -> None:
        fee = self.fees.estimate(self.chain, Network.MAINNET, FeeKind.DEPLOY)

        self.assertEqual(fee.estimated_trx_cost, Decimal("33.18"))
        self.assertEqual(fee.estimated_usd_cost, Decimal("8.30"))

    def test_transfer_and_mint_burn(self) -> None:
        transfer = self.fees.estimate(self.chain, Network.TESTNET, FeeKind.TRANSFER)
        mint_burn = self.fees.estimate(self.chain, Network.TESTNET, FeeKind.MINT_BURN)

        self.assertEqual((transfer.energy_required, transfer.bandwidth_required), (14500, 345))
        self.assertEqual(transfer.estimated_trx_cost, Decimal("7.08"))
        self.assertEqual((mint_burn.energy_required, mint_burn.bandwidth_required), (12000, 345))
        self.assertEqual(mint_burn.estimated_trx_cost, Decimal("5.92"))

    def test_follows_live_energy_price(self) -> None:
        chain = StaticChainAdapter(fee_params=ChainFeeParams(210, 1000))
        fee = self.fees.estimate(chain, Network.TESTNET, FeeKind.DEPLOY)

        # (65000 * 210 + 350 * 1000) sun = 14.00 TRX, * 1.1
        self.assertEqual(fee.estimated_trx_cost, Decimal("15.40"))


if __name__ == "__main__":
    unittest.main()
