import hashlib
import itertools
import threading
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from tronconsole.core.dto import ChainFeeParams, DeployParams, DeployResult, NewAccount, TokenInfo
from tronconsole.core.errors import ChainError, DataSourceError
from tronconsole.ports.chain_gateway_port import ChainGatewayPort
from tronconsole.tron import keys


@dataclass
class _Contract:
    name: str
    symbol: str
    decimals: int
    owner: str
    balances: Dict[str, int] = field(default_factory=dict)

    @property
    def total_supply(self) -> int:
        return sum(self.balances.values())


class StaticChainAdapter(ChainGatewayPort):
    """
    In-memory ledger for dev/testing. Keys and addresses are real, nothing
    leaves the process.

    `fees` charges a flat TRX amount per operation ("deploy", "transfer",
    "mint", "burn"); `failing` lists operations that raise ChainError. Every account not
    funded explicitly starts with `starting_trx`.
    """

    def __init__(self,
                 trx_balances: Optional[Dict[str, Decimal]] = None,
                 fee_params: Optional[ChainFeeParams] = None,
                 fees: Optional[Dict[str, Decimal]] = None,
                 failing: Optional[Iterable[str]] = None,
                 starting_trx: Decimal = Decimal("0"),
                 ):
        self._trx = {k.lower(): Decimal(v) for k, v in (trx_balances or {}).items()}
        self._fee_params = fee_params or ChainFeeParams(420, 1000)
        self._fees = {k: Decimal(v) for k, v in (fees or {}).items()}
        self._failing = set(failing or ())
        self._starting_trx = Decimal(starting_trx)
        self._contracts: Dict[str, _Contract] = {}
        self._receipts: Dict[str, Dict[str, Any]] = {}
        self._seq = itertools.count(1)
        self._lock = threading.Lock()

    # --- test helpers ---

    def fund(self, address: str, trx: Decimal) -> None:
        with self._lock:
            self._trx[address.lower()] = self._balance(address) + Decimal(trx)

    def add_contract(self, address: str, name: str, symbol: str, decimals: int, owner: str,
                     balances: Optional[Dict[str, int]] = None) -> None:
        self._contracts[address.lower()] = _Contract(
            name, symbol, decimals, owner, {k.lower(): v for k, v in (balances or {}).items()}
        )

    def raw_balance(self, token_address: str, holder: str) -> int:
        return self._contract(token_address).balances.get(holder.lower(), 0)

    # --- internal ---

    def _balance(self, address: str) -> Decimal:
        # accounts never seen before hold the starting balance
        return self._trx.get(address.lower(), self._starting_trx)

    def _contract(self, address: str) -> _Contract:
        c = self._contracts.get(address.lower())
        if c is None:
            raise DataSourceError(f"No contract at {address}")
        return c

    def _submit(self, op: str, sender: str) -> str:
        if op in self._failing:
            raise ChainError(f"{op} reverted")
        fee = self._fees.get(op, Decimal("0"))
        have = self._balance(sender)
        if have < fee:
            raise ChainError(f"Account {sender} cannot pay {fee} TRX fee")
        self._trx[sender.lower()] = have - fee
        txid = hashlib.sha256(f"static-{next(self._seq)}".encode()).hexdigest()
        self._receipts[txid] = {"id": txid, "receipt": {"result": "SUCCESS"}}
        return txid

    # --- port ---

    def create_account(self) -> NewAccount:
        pk = keys.generate_private_key()
        return NewAccount(keys.private_key_to_address(pk), pk)

    def address_from_private_key(self, private_key):
        return keys.private_key_to_address(private_key)

    def get_trx_balance(self, address):
        return self._balance(address)

    def get_chain_fee_params(self):
        return self._fee_params

    def deploy_token(self, params: DeployParams, private_key: str) -> DeployResult:
        owner = keys.private_key_to_address(private_key)
        with self._lock:
            txid = self._submit("deploy", owner)
            address = keys.private_key_to_address(keys.generate_private_key())
            self._contracts[address.lower()] = _Contract(
                params.name, params.symbol, params.decimals, owner,
                {owner.lower(): int(params.initial_supply) * 10 ** params.decimals},
            )
            self._receipts[txid]["contract_address"] = keys.to_hex_address(address)
        return DeployResult(tx_hash=txid, contract_address=address)

    def transfer_token(self, token_address, to_address, amount, private_key):
        sender = keys.private_key_to_address(private_key)
        with self._lock:
            c = self._contract(token_address)
            have = c.balances.get(sender.lower(), 0)
            if have < amount:
                raise ChainError("REVERT: transfer amount exceeds balance")
            txid = self._submit("transfer", sender)
            c.balances[sender.lower()] = have - amount
            c.balances[to_address.lower()] = c.balances.get(to_address.lower(), 0) + amount
        return txid

    def mint_token(self, token_address, amount, private_key):
        sender = keys.private_key_to_address(private_key)
        with self._lock:
            c = self._contract(token_address)
            if not keys.same_address(c.owner, sender):
                raise ChainError("REVERT: caller is not the owner")
            txid = self._submit("mint", sender)
            c.balances[sender.lower()] = c.balances.get(sender.lower(), 0) + amount
        return txid

    def burn_token(self, token_address, amount, private_key):
        sender = keys.private_key_to_address(private_key)
        with self._lock:
            c = self._contract(token_address)
            have = c.balances.get(sender.lower(), 0)
            if have < amount:
                raise ChainError("REVERT: burn amount exceeds balance")
            txid = self._submit("burn", sender)
            c.balances[sender.lower()] = have - amount
        return txid

    def get_token_balance(self, token_address, holder_address):
        c = self._contract(token_address)
        return Decimal(c.balances.get(holder_address.lower(), 0)).scaleb(-c.decimals)

    def get_token_decimals(self, token_address):
        return self._contract(token_address).decimals

    def get_token_info(self, token_address):
        c = self._contract(token_address)
        return TokenInfo(token_address, c.name, c.symbol, c.decimals, Decimal(c.total_supply).scaleb(-c.decimals))

    def get_token_owner(self, token_address):
        return self._contract(token_address).owner

    def get_transaction_info(self, tx_hash):
        return self._receipts.get(tx_hash)
