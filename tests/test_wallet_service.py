import unittest
from decimal import Decimal

from tronconsole.adapters.chain.static_chain_adapter import StaticChainAdapter
from tronconsole.adapters.storage.memory_store import MemoryStore
from tronconsole.core.enums import Network
from tronconsole.core.errors import ValidationError, WalletNotConnectedError
from tronconsole.services.session import ConsoleSession, GatewayFactory, SessionHolder
from tronconsole.services.wallet_service import WalletService
from tronconsole.tron import keys


class _CountingBuild:
    def __init__(self) -> None:
        self.calls = []

    def __call__(self, network: Network) -> StaticChainAdapter:
        self.calls.append(network)
        return StaticChainAdapter()


class WalletServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.chain = StaticChainAdapter()
        self.store = MemoryStore()
        self.svc = WalletService(GatewayFactory(lambda _network: self.chain), self.store)
        self.session = ConsoleSession(network=Network.TESTNET)

    def test_create_binds_wallet_to_current_network(self) -> None:
        session = self.svc.create(self.session)

        self.assertTrue(keys.is_address(session.wallet.address))
        self.assertEqual(session.wallet.network, Network.TESTNET)
        self.assertTrue(session.wallet.can_sign)
        self.assertIsNone(self.session.wallet)

    def test_import_accepts_0x_prefix(self) -> None:
        pk = keys.generate_private_key()

        session = self.svc.import_key(self.session, "0x" + pk)

        self.assertEqual(session.wallet.address, keys.private_key_to_address(pk))
        self.assertEqual(session.wallet.private_key, pk)

    def test_import_rejects_bad_key(self) -> None:
        with self.assertRaises(ValidationError):
            self.svc.import_key(self.session, "not-a-key")

    def test_disconnect(self) -> None:
        session = self.svc.disconnect(self.svc.create(self.session))
        self.assertIsNone(session.wallet)
        with self.assertRaises(WalletNotConnectedError):
            session.require_wallet()

    def test_balances_include_known_tokens(self) -> None:
        session = self.svc.create(self.session)
        me = session.wallet.address
        token = keys.private_key_to_address(keys.generate_private_key())
        self.chain.fund(me, Decimal("12.5"))
        self.chain.add_contract(token, "Test", "TST", 2, owner=me, balances={me: 1234})
        self.store.create_token(token, "Test", "TST", 2, "12.34", me, Network.TESTNET)
        # a listed token whose contract the node does not know
        ghost = keys.private_key_to_address(keys.generate_private_key())
        self.store.create_token(ghost, "Ghost", "GST", 6, "1", me, Network.TESTNET)

        balances = self.svc.balances(session)

        self.assertEqual(balances.trx_balance, Decimal("12.5"))
        (only,) = balances.token_balances
        self.assertEqual(only.symbol, "TST")
        self.assertEqual(only.balance, Decimal("12.34"))

    def test_balances_need_a_wallet(self) -> None:
        with self.assertRaises(WalletNotConnectedError):
            self.svc.balances(self.session)


class SessionTests(unittest.TestCase):
    def test_switch_network_rebinds_wallet(self) -> None:
        pk = keys.generate_private_key()
        svc = WalletService(GatewayFactory(lambda _network: StaticChainAdapter()), MemoryStore())
        session = svc.import_key(ConsoleSession(network=Network.TESTNET), pk)

        switched = session.with_network(Network.MAINNET)

        self.assertEqual(switched.network, Network.MAINNET)
        self.assertEqual(switched.wallet.network, Network.MAINNET)
        self.assertEqual(switched.wallet.address, session.wallet.address)
        self.assertEqual(session.network, Network.TESTNET)

    def test_holder_replaces_session(self) -> None:
        holder = SessionHolder(ConsoleSession(network=Network.TESTNET))
        holder.set(holder.get().with_network(Network.MAINNET))
        self.assertEqual(holder.get().network, Network.MAINNET)

    def test_gateway_rebuilt_on_network_or_wallet_change(self) -> None:
        build = _CountingBuild()
        factory = GatewayFactory(build)
        session = ConsoleSession(network=Network.TESTNET)

        first = factory.for_session(session)
        self.assertIs(factory.for_session(session), first)

        factory.for_session(session.with_network(Network.MAINNET))
        self.assertEqual(build.calls, [Network.TESTNET, Network.MAINNET])


if __name__ == "__main__":
    unittest.main()
