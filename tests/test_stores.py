import unittest

from tronconsole.adapters.storage.memory_store import MemoryStore
from tronconsole.adapters.storage.sql_store import SqlStore
from tronconsole.core.enums import Network, TxStatus, TxType
from tronconsole.core.errors import DuplicateRecordError, InvalidStatusTransition, NotFoundError
from tronconsole.core.models import PENDING_TX_HASH

TOKEN = "TR7NHqjeKQxGTCi8q8ZY4pL8otSzgjLj6t"
DEPLOYER = "TJRabPrwbZy45sbavfcjinPJC18kjpRTv8"


class _StoreContract:
    """Shared behaviour; subclasses provide `make_store`."""

    def make_store(self):
        raise NotImplementedError

    def setUp(self) -> None:
        self.store = self.make_store()

    def _token(self, network=Network.TESTNET, address=TOKEN, supply="1000"):
        return self.store.create_token(
            contract_address=address,
            name="Test",
            symbol="TST",
            decimals=6,
            total_supply=supply,
            deployer_address=DEPLOYER,
            network=network,
        )

    def test_transaction_starts_pending(self) -> None:
        tx = self.store.create_transaction(TxType.DEPLOY, Network.TESTNET, from_address=DEPLOYER)

        self.assertEqual(tx.status, TxStatus.PENDING)
        self.assertEqual(tx.tx_hash, PENDING_TX_HASH)
        self.assertIsNotNone(tx.timestamp.tzinfo)

    def test_complete_sets_hash_and_contract(self) -> None:
        tx = self.store.create_transaction(TxType.DEPLOY, Network.TESTNET, from_address=DEPLOYER)
        done = self.store.complete_transaction(tx.id, TxStatus.CONFIRMED, tx_hash="ab" * 32, token_address=TOKEN)

        self.assertEqual(done.status, TxStatus.CONFIRMED)
        self.assertEqual(self.store.get_transaction(tx.id).tx_hash, "ab" * 32)
        self.assertEqual(self.store.get_transaction_by_hash("ab" * 32).token_address, TOKEN)

    def test_terminal_status_is_final(self) -> None:
        tx = self.store.create_transaction(TxType.MINT, Network.TESTNET)
        self.store.complete_transaction(tx.id, TxStatus.FAILED, error="REVERT")

        with self.assertRaises(InvalidStatusTransition):
            self.store.complete_transaction(tx.id, TxStatus.CONFIRMED)
        with self.assertRaises(InvalidStatusTransition):
            self.store.complete_transaction(tx.id, TxStatus.PENDING)
        self.assertEqual(self.store.get_transaction(tx.id).error, "REVERT")

    def test_pending_cannot_go_to_pending(self) -> None:
        tx = self.store.create_transaction(TxType.BURN, Network.TESTNET)
        with self.assertRaises(InvalidStatusTransition):
            self.store.complete_transaction(tx.id, TxStatus.PENDING)

    def test_complete_unknown_transaction(self) -> None:
        with self.assertRaises(NotFoundError):
            self.store.complete_transaction("missing", TxStatus.CONFIRMED)

    def test_pending_hash_is_not_a_lookup_key(self) -> None:
        self.store.create_transaction(TxType.TRANSFER, Network.TESTNET)
        self.assertIsNone(self.store.get_transaction_by_hash(PENDING_TX_HASH))

    def test_transactions_newest_first_and_limited(self) -> None:
        ids = [self.store.create_transaction(TxType.TRANSFER, Network.TESTNET).id for _ in range(5)]

        listed = self.store.list_transactions(Network.TESTNET)
        self.assertEqual([t.id for t in listed], list(reversed(ids)))

        limited = self.store.list_transactions(Network.TESTNET, limit=2)
        self.assertEqual([t.id for t in limited], [ids[4], ids[3]])

    def test_listings_are_scoped_to_network(self) -> None:
        self._token(Network.TESTNET)
        self._token(Network.MAINNET)
        self.store.create_transaction(TxType.DEPLOY, Network.MAINNET)

        self.assertEqual(len(self.store.list_tokens(Network.TESTNET)), 1)
        self.assertEqual(len(self.store.list_tokens(Network.MAINNET)), 1)
        self.assertEqual(self.store.list_transactions(Network.TESTNET), [])
        self.assertEqual(len(self.store.list_transactions(Network.MAINNET)), 1)

    def test_token_lookup_by_address_ignores_case(self) -> None:
        token = self._token()

        found = self.store.get_token_by_address(TOKEN.lower(), Network.TESTNET)
        self.assertEqual(found.id, token.id)
        self.assertIsNone(self.store.get_token_by_address(TOKEN, Network.MAINNET))

    def test_update_supply(self) -> None:
        token = self._token()
        self.store.update_token_supply(token.id, "1050")

        updated = self.store.get_token(token.id)
        self.assertEqual(updated.total_supply, "1050")
        self.assertGreaterEqual(updated.updated_at, token.updated_at)
        with self.assertRaises(NotFoundError):
            self.store.update_token_supply("missing", "1")

    def test_delete_token(self) -> None:
        token = self._token()

        self.assertTrue(self.store.delete_token(token.id))
        self.assertFalse(self.store.delete_token(token.id))
        self.assertIsNone(self.store.get_token(token.id))

    def test_contract_address_unique_per_network(self) -> None:
        self._token(Network.TESTNET)

        with self.assertRaises(DuplicateRecordError):
            self._token(Network.TESTNET, address=TOKEN.lower())
        self._token(Network.MAINNET)

        self.assertEqual(len(self.store.list_tokens(Network.TESTNET)), 1)
        self.assertEqual(len(self.store.list_tokens(Network.MAINNET)), 1)

    def test_settled_hash_is_unique(self) -> None:
        first = self.store.create_transaction(TxType.TRANSFER, Network.TESTNET)
        second = self.store.create_transaction(TxType.TRANSFER, Network.TESTNET)
        self.store.complete_transaction(first.id, TxStatus.CONFIRMED, tx_hash="ab" * 32)

        with self.assertRaises(DuplicateRecordError):
            self.store.complete_transaction(second.id, TxStatus.CONFIRMED, tx_hash="ab" * 32)

        self.assertEqual(self.store.get_transaction(second.id).status, TxStatus.PENDING)
        self.store.complete_transaction(second.id, TxStatus.FAILED, error="REVERT")
        self.assertEqual(self.store.get_transaction(second.id).tx_hash, PENDING_TX_HASH)

    def test_returned_records_are_copies(self) -> None:
        token = self._token()
        token.total_supply = "0"
        self.assertEqual(self.store.get_token(token.id).total_supply, "1000")


class MemoryStoreTests(_StoreContract, unittest.TestCase):
    def make_store(self):
        return MemoryStore()


class SqlStoreTests(_StoreContract, unittest.TestCase):
    def make_store(self):
        return SqlStore("sqlite://")


if __name__ == "__main__":
    unittest.main()
