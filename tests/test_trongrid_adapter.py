import unittest
from decimal import Decimal
from unittest import mock

import requests
from eth_abi import encode as abi_encode

from tronconsole.adapters.chain.rate_limiter import poll_until
from tronconsole.adapters.chain.trongrid_adapter import TronGridChainAdapter
from tronconsole.core.dto import ChainFeeParams, DeployParams
from tronconsole.core.enums import Network
from tronconsole.core.errors import ChainError, ContractArtifactError, DataSourceError, RateLimitError
from tronconsole.tron import keys
from tronconsole.tron.receipts import decode_message, failure_reason

USDT = "TR7NHqjeKQxGTCi8q8ZY4pL8otSzgjLj6t"
USDT_HEX = "41a614f803b6fd780986a42c78ec9c7f77e6ded13c"
TXID = "ab" * 32


def _resp(payload, status: int = 200):
    r = mock.Mock()
    r.status_code = status
    r.json.return_value = payload
    if status >= 400:
        r.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    return r


def _constant(types, values):
    return {"result": {"result": True}, "constant_result": [abi_encode(types, values).hex()]}


class TronGridChainAdapterTests(unittest.TestCase):
    def setUp(self) -> None:
        self.http = mock.Mock()
        self.http.headers = {}
        self.pk = keys.generate_private_key()
        self.chain = self._adapter()

    def _adapter(self, **kwargs) -> TronGridChainAdapter:
        kwargs.setdefault("confirm_timeout", 0)
        return TronGridChainAdapter(
            Network.TESTNET, base_url="https://node.test/", api_key="", session=self.http, **kwargs
        )

    def _reply(self, *payloads) -> None:
        self.http.post.side_effect = [p if isinstance(p, mock.Mock) else _resp(p) for p in payloads]

    def _posted(self, i: int = 0):
        args, kwargs = self.http.post.call_args_list[i]
        return args[0], kwargs["json"]

    # ---------- transport ----------

    def test_api_key_header(self) -> None:
        TronGridChainAdapter(Network.MAINNET, api_key="secret", session=self.http)
        self.assertEqual(self.http.headers["TRON-PRO-API-KEY"], "secret")

    def test_trx_balance_in_trx_units(self) -> None:
        self._reply({"balance": 12_500_000}, {})

        self.assertEqual(self.chain.get_trx_balance(USDT), Decimal("12.5"))
        self.assertEqual(self.chain.get_trx_balance(USDT), Decimal("0"))

        url, body = self._posted()
        self.assertEqual(url, "https://node.test/wallet/getaccount")
        self.assertEqual(body, {"address": USDT, "visible": True})

    def test_rate_limit_and_network_errors(self) -> None:
        self._reply(_resp({}, status=429))
        with self.assertRaises(RateLimitError):
            self.chain.get_token_decimals(USDT)

        self.http.post.side_effect = requests.ConnectionError("down")
        with self.assertRaises(DataSourceError):
            self.chain.get_trx_balance(USDT)

    def test_node_error_field(self) -> None:
        self._reply({"Error": "class org.tron.core.exception.BadItemException"})
        with self.assertRaises(DataSourceError):
            self.chain.get_transaction_info(TXID)

    def test_chain_fee_params(self) -> None:
        self._reply({"chainParameter": [
            {"key": "getTransactionFee", "value": 1000},
            {"key": "getEnergyFee", "value": 210},
            {"key": "getMaintenanceTimeInterval", "value": 21600000},
        ]})
        self.assertEqual(self.chain.get_chain_fee_params(), ChainFeeParams(210, 1000))

    def test_chain_fee_params_fall_back_to_defaults(self) -> None:
        self._reply(_resp({}, status=503))
        self.assertEqual(self.chain.get_chain_fee_params(), ChainFeeParams(420, 1000))

    # ---------- contract reads ----------

    def test_decimals_are_cached(self) -> None:
        self._reply(_constant(["uint8"], [6]))

        self.assertEqual(self.chain.get_token_decimals(USDT), 6)
        self.assertEqual(self.chain.get_token_decimals(USDT), 6)
        self.assertEqual(self.http.post.call_count, 1)

        _, body = self._posted()
        self.assertEqual(body["function_selector"], "decimals()")
        self.assertEqual(body["parameter"], "")

    def test_token_balance_scaled_by_decimals(self) -> None:
        self._reply(_constant(["uint256"], [1_234_500]), _constant(["uint8"], [6]))

        self.assertEqual(self.chain.get_token_balance(USDT, USDT), Decimal("1.2345"))

        _, body = self._posted()
        self.assertEqual(body["function_selector"], "balanceOf(address)")
        self.assertEqual(body["parameter"], abi_encode(["address"], ["0x" + USDT_HEX[2:]]).hex())

    def test_owner_is_returned_as_base58(self) -> None:
        self._reply(_constant(["address"], ["0x" + USDT_HEX[2:]]))
        self.assertEqual(self.chain.get_token_owner(USDT), USDT)

    def test_token_info(self) -> None:
        self._reply(
            _constant(["string"], ["Test"]),
            _constant(["string"], ["TST"]),
            _constant(["uint8"], [6]),
            _constant(["uint256"], [1000 * 10**6]),
        )
        info = self.chain.get_token_info(USDT)
        self.assertEqual((info.name, info.symbol, info.decimals, info.total_supply), ("Test", "TST", 6, Decimal("1000")))

    def test_reverted_constant_call(self) -> None:
        self._reply({"result": {"message": "REVERT opcode executed".encode().hex()}})
        with self.assertRaises(DataSourceError) as ctx:
            self.chain.get_token_owner(USDT)
        self.assertIn("REVERT opcode executed", str(ctx.exception))

    # ---------- contract writes ----------

    def test_transfer_signs_and_broadcasts(self) -> None:
        self._reply(
            {"result": {"result": True}, "transaction": {"txID": TXID, "raw_data": {}}},
            {"result": True, "txid": TXID},
        )

        self.assertEqual(self.chain.transfer_token(USDT, USDT, 5, self.pk), TXID)

        url, trigger = self._posted(0)
        self.assertTrue(url.endswith("wallet/triggersmartcontract"))
        self.assertEqual(trigger["owner_address"], keys.private_key_to_address(self.pk))
        self.assertEqual(trigger["function_selector"], "transfer(address,uint256)")
        url, signed = self._posted(1)
        self.assertTrue(url.endswith("wallet/broadcasttransaction"))
        self.assertEqual(len(bytes.fromhex(signed["signature"][0])), 65)

    def test_broadcast_rejected(self) -> None:
        self._reply(
            {"result": {"result": True}, "transaction": {"txID": TXID, "raw_data": {}}},
            {"result": False, "code": "SIGERROR", "message": "validate signature error".encode().hex()},
        )
        with self.assertRaises(ChainError) as ctx:
            self.chain.mint_token(USDT, 1, self.pk)
        self.assertIn("SIGERROR", str(ctx.exception))
        self.assertIn("validate signature error", str(ctx.exception))

    def test_failed_receipt_raises(self) -> None:
        chain = self._adapter(confirm_timeout=1, confirm_poll=0.01)
        self._reply(
            {"result": {"result": True}, "transaction": {"txID": TXID, "raw_data": {}}},
            {"result": True},
            {"id": TXID, "result": "FAILED", "resMessage": "REVERT opcode executed".encode().hex(),
             "receipt": {"result": "REVERT"}},
        )
        with self.assertRaises(ChainError) as ctx:
            chain.burn_token(USDT, 1, self.pk)
        self.assertIn("REVERT opcode executed", str(ctx.exception))

    def test_successful_receipt(self) -> None:
        chain = self._adapter(confirm_timeout=1, confirm_poll=0.01)
        self._reply(
            {"result": {"result": True}, "transaction": {"txID": TXID, "raw_data": {}}},
            {"result": True},
            {},
            {"id": TXID, "receipt": {"result": "SUCCESS"}},
        )
        self.assertEqual(chain.mint_token(USDT, 1, self.pk), TXID)
        self.assertEqual(self.http.post.call_count, 4)

    @mock.patch("tronconsole.config.settings.TRC20_BYTECODE", "6080604052")
    def test_deploy(self) -> None:
        self._reply(
            {"txID": TXID, "raw_data": {}, "contract_address": USDT_HEX},
            {"result": True},
        )

        result = self.chain.deploy_token(DeployParams("Test", "TST", 6, "1000"), self.pk)

        self.assertEqual((result.tx_hash, result.contract_address), (TXID, USDT))
        _, body = self._posted(0)
        self.assertEqual(body["bytecode"], "6080604052")
        self.assertEqual(
            body["parameter"],
            abi_encode(["string", "string", "uint8", "uint256"], ["Test", "TST", 6, 1000]).hex(),
        )
        self.assertEqual(body["fee_limit"], 1_000_000_000)

    @mock.patch("tronconsole.config.settings.TRC20_BYTECODE_PATH", "no/such/file.bin")
    @mock.patch("tronconsole.config.settings.TRC20_BYTECODE", "")
    def test_deploy_without_bytecode(self) -> None:
        with self.assertRaises(ContractArtifactError):
            self.chain.deploy_token(DeployParams("Test", "TST", 6, "1000"), self.pk)
        self.http.post.assert_not_called()


class ReceiptTests(unittest.TestCase):
    def test_success(self) -> None:
        self.assertIsNone(failure_reason({"id": TXID, "receipt": {"result": "SUCCESS"}}))
        # plain TRX transfers carry no receipt result
        self.assertIsNone(failure_reason({"id": TXID, "receipt": {"net_usage": 268}}))

    def test_failure_keeps_decoded_message(self) -> None:
        info = {
            "id": TXID,
            "result": "FAILED",
            "resMessage": "REVERT opcode executed".encode().hex(),
            "receipt": {"result": "REVERT"},
        }
        self.assertEqual(failure_reason(info), "REVERT opcode executed")

    def test_failure_without_message(self) -> None:
        self.assertEqual(failure_reason({"receipt": {"result": "OUT_OF_ENERGY"}}), "OUT_OF_ENERGY")
        self.assertEqual(failure_reason({"result": "FAILED"}), "FAILED")

    def test_decode_message_passes_plain_text_through(self) -> None:
        self.assertEqual(decode_message("not hex at all"), "not hex at all")
        self.assertEqual(decode_message(42), "42")


class PollUntilTests(unittest.TestCase):
    def test_returns_first_truthy_result(self) -> None:
        results = iter([None, {}, {"id": "x"}])
        self.assertEqual(poll_until(lambda: next(results), timeout=1, interval=0.01), {"id": "x"})

    def test_gives_up_after_timeout(self) -> None:
        self.assertIsNone(poll_until(lambda: None, timeout=0.05, interval=0.01))


if __name__ == "__main__":
    unittest.main()
