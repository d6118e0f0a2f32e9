from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

import requests
from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from loguru import logger

from tronconsole.config.settings import (
    CALL_FEE_LIMIT_SUN,
    DEFAULT_ENERGY_FEE_SUN,
    DEFAULT_TRANSACTION_FEE_SUN,
    DEPLOY_FEE_LIMIT_SUN,
    DEPLOY_ORIGIN_ENERGY_LIMIT,
    DEPLOY_USER_RESOURCE_PERCENT,
    NETWORK_URLS,
    SUN_PER_TRX,
    TRONGRID_API_KEY,
    TRONGRID_REQUESTS_PER_SEC,
    TRONGRID_TIMEOUT_SEC,
    TX_CONFIRM_POLL_SEC,
    TX_CONFIRM_TIMEOUT_SEC,
)

from tronconsole.adapters.chain.rate_limiter import SimpleRateLimiter, poll_until
from tronconsole.contracts import trc20
from tronconsole.core.dto import ChainFeeParams, DeployParams, DeployResult, NewAccount, TokenInfo
from tronconsole.core.enums import Network
from tronconsole.core.errors import ChainError, DataSourceError, RateLimitError
from tronconsole.ports.chain_gateway_port import ChainGatewayPort
from tronconsole.tron import keys
from tronconsole.tron.receipts import decode_message, failure_reason


class TronGridChainAdapter(ChainGatewayPort):
    """
    TronGrid full-node HTTP API. Transactions are built by the node, signed
    locally and broadcast; nothing is retried.
    """

    def __init__(
        self,
        network: Network,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        confirm_timeout: float = TX_CONFIRM_TIMEOUT_SEC,
        confirm_poll: float = TX_CONFIRM_POLL_SEC,
    ) -> None:
        self._network = network
        self._base_url = (base_url or NETWORK_URLS[network.value]).rstrip("/")
        self._api_key = TRONGRID_API_KEY if api_key is None else api_key
        self._timeout = TRONGRID_TIMEOUT_SEC
        self._confirm_timeout = confirm_timeout
        self._confirm_poll = confirm_poll

        self._rl = SimpleRateLimiter(TRONGRID_REQUESTS_PER_SEC)
        self._session = session or requests.Session()
        if self._api_key:
            self._session.headers["TRON-PRO-API-KEY"] = self._api_key
            logger.info(f"TronGrid client initialized with API key for {network.value}")
        else:
            logger.info(f"TronGrid client initialized without API key for {network.value} (rate limits may apply)")

        self._decimals_cache: Dict[str, int] = {}

    @property
    def network(self) -> Network:
        return self._network

    # ---------- internal ----------

    def _call(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self._base_url}/{path.lstrip('/')}"
        try:
            self._rl.wait()
            resp = self._session.post(url, json=payload, timeout=self._timeout)
            if resp.status_code == 429:
                raise RateLimitError(f"TronGrid rate limit hit on {path}")
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as e:
            raise DataSourceError(f"TronGrid {path} failed on {self._network.value}: {e}") from e
        except ValueError as e:
            raise DataSourceError(f"TronGrid {path} returned invalid JSON") from e

        if not isinstance(data, dict):
            raise DataSourceError(f"Unexpected TronGrid response for {path}: {data}")
        if "Error" in data:
            raise DataSourceError(f"TronGrid {path}: {data['Error']}")
        return data

    @staticmethod
    def _encode(types: Sequence[str], values: Sequence[Any]) -> str:
        return abi_encode(list(types), list(values)).hex() if types else ""

    def _constant(
        self,
        token_address: str,
        selector: str,
        types: Sequence[str] = (),
        values: Sequence[Any] = (),
        out_types: Sequence[str] = ("uint256",),
        owner_address: Optional[str] = None,
    ) -> List[Any]:
        data = self._call("wallet/triggerconstantcontract", {
            "owner_address": owner_address or token_address,
            "contract_address": token_address,
            "function_selector": selector,
            "parameter": self._encode(types, values),
            "visible": True,
        })
        result = data.get("result") or {}
        out = data.get("constant_result") or []
        if not result.get("result") or not out or not out[0]:
            raise DataSourceError(
                f"{selector} on {token_address} failed: {decode_message(result.get('message', 'empty result'))}"
            )
        return list(abi_decode(list(out_types), bytes.fromhex(out[0])))

    def _sign_and_send(self, tx: Dict[str, Any], private_key: str) -> str:
        txid = tx.get("txID")
        if not txid:
            raise ChainError(f"Node returned no transaction: {tx}")
        signed = dict(tx)
        signed["signature"] = [keys.sign_txid(txid, private_key)]

        data = self._call("wallet/broadcasttransaction", signed)
        if not data.get("result"):
            code = data.get("code", "UNKNOWN")
            raise ChainError(f"Broadcast rejected ({code}): {decode_message(data.get('message', ''))}")

        self._check_receipt(txid)
        return txid

    def _check_receipt(self, txid: str) -> None:
        if self._confirm_timeout <= 0:
            return
        info = poll_until(lambda: self.get_transaction_info(txid), self._confirm_timeout, self._confirm_poll)
        if info is None:
            logger.warning(f"No receipt for {txid} after {self._confirm_timeout}s; broadcast was accepted")
            return
        reason = failure_reason(info)
        if reason:
            raise ChainError(f"Transaction {txid} failed on-chain: {reason}")

    def _trigger(
        self,
        token_address: str,
        selector: str,
        types: Sequence[str],
        values: Sequence[Any],
        private_key: str,
    ) -> str:
        owner = keys.private_key_to_address(private_key)
        data = self._call("wallet/triggersmartcontract", {
            "owner_address": owner,
            "contract_address": token_address,
            "function_selector": selector,
            "parameter": self._encode(types, values),
            "fee_limit": CALL_FEE_LIMIT_SUN,
            "call_value": 0,
            "visible": True,
        })
        result = data.get("result") or {}
        if not result.get("result") or "transaction" not in data:
            raise ChainError(f"{selector} rejected: {decode_message(result.get('message', 'no transaction'))}")
        return self._sign_and_send(data["transaction"], private_key)

    # ---------- keys ----------

    def create_account(self) -> NewAccount:
        pk = keys.generate_private_key()
        return NewAccount(address=keys.private_key_to_address(pk), private_key=pk)

    def address_from_private_key(self, private_key: str) -> str:
        return keys.private_key_to_address(private_key)

    # ---------- native currency / resources ----------

    def get_trx_balance(self, address: str) -> Decimal:
        logger.debug(f"Fetching balance for {address} on {self._network.value}")
        try:
            data = self._call("wallet/getaccount", {"address": address, "visible": True})
        except DataSourceError as e:
            raise DataSourceError(f"Failed to fetch balance from {self._network.value}: {e}") from e
        # unactivated accounts come back as {}
        return Decimal(int(data.get("balance", 0))) / SUN_PER_TRX

    def get_chain_fee_params(self) -> ChainFeeParams:
        try:
            data = self._call("wallet/getchainparameters", {})
        except DataSourceError as e:
            logger.warning(f"Chain parameters unavailable, using defaults: {e}")
            return ChainFeeParams(DEFAULT_ENERGY_FEE_SUN, DEFAULT_TRANSACTION_FEE_SUN)

        params = {p.get("key"): p.get("value") for p in data.get("chainParameter", []) if isinstance(p, dict)}
        return ChainFeeParams(
            energy_fee_sun=int(params.get("getEnergyFee") or DEFAULT_ENERGY_FEE_SUN),
            transaction_fee_sun=int(params.get("getTransactionFee") or DEFAULT_TRANSACTION_FEE_SUN),
        )

    # ---------- contract writes ----------

    def deploy_token(self, params: DeployParams, private_key: str) -> DeployResult:
        owner = keys.private_key_to_address(private_key)
        logger.info(
            f"Deploying {params.symbol} ({params.name}, decimals={params.decimals}, "
            f"supply={params.initial_supply}) from {owner} on {self._network.value}"
        )
        data = self._call("wallet/deploycontract", {
            "owner_address": owner,
            "abi": trc20.abi_json(),
            "bytecode": trc20.load_bytecode(),
            "parameter": self._encode(
                trc20.CONSTRUCTOR_TYPES,
                [params.name, params.symbol, params.decimals, int(params.initial_supply)],
            ),
            "name": trc20.CONTRACT_NAME,
            "fee_limit": DEPLOY_FEE_LIMIT_SUN,
            "call_value": 0,
            "consume_user_resource_percent": DEPLOY_USER_RESOURCE_PERCENT,
            "origin_energy_limit": DEPLOY_ORIGIN_ENERGY_LIMIT,
            "visible": True,
        })

        raw_address = data.get("contract_address")
        if not raw_address:
            raise ChainError("No contract address returned from deployment")
        contract_address = raw_address if keys.is_address(raw_address) else keys.to_base58_address(raw_address)

        txid = self._sign_and_send(data, private_key)
        logger.info(f"Contract deployed at {contract_address} (tx {txid})")
        return DeployResult(tx_hash=txid, contract_address=contract_address)

    def transfer_token(self, token_address: str, to_address: str, amount: int, private_key: str) -> str:
        return self._trigger(
            token_address,
            "transfer(address,uint256)",
            ["address", "uint256"],
            [keys.to_abi_address(to_address), amount],
            private_key,
        )

    def mint_token(self, token_address: str, amount: int, private_key: str) -> str:
        return self._trigger(token_address, "mint(uint256)", ["uint256"], [amount], private_key)

    def burn_token(self, token_address: str, amount: int, private_key: str) -> str:
        return self._trigger(token_address, "burn(uint256)", ["uint256"], [amount], private_key)

    # ---------- contract reads ----------

    def get_token_decimals(self, token_address: str) -> int:
        if token_address not in self._decimals_cache:
            (dec,) = self._constant(token_address, "decimals()", out_types=("uint8",))
            self._decimals_cache[token_address] = int(dec)
        return self._decimals_cache[token_address]

    def get_token_balance(self, token_address: str, holder_address: str) -> Decimal:
        (raw,) = self._constant(
            token_address,
            "balanceOf(address)",
            ["address"],
            [keys.to_abi_address(holder_address)],
            owner_address=holder_address,
        )
        return Decimal(int(raw)).scaleb(-self.get_token_decimals(token_address))

    def get_token_info(self, token_address: str) -> TokenInfo:
        (name,) = self._constant(token_address, "name()", out_types=("string",))
        (symbol,) = self._constant(token_address, "symbol()", out_types=("string",))
        decimals = self.get_token_decimals(token_address)
        (supply,) = self._constant(token_address, "totalSupply()")
        return TokenInfo(
            contract_address=token_address,
            name=name,
            symbol=symbol,
            decimals=decimals,
            total_supply=Decimal(int(supply)).scaleb(-decimals),
        )

    def get_token_owner(self, token_address: str) -> str:
        (owner,) = self._constant(token_address, "owner()", out_types=("address",))
        return keys.to_base58_address(owner)

    # ---------- receipts ----------

    def get_transaction_info(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        data = self._call("wallet/gettransactioninfobyid", {"value": tx_hash})
        return data or None
