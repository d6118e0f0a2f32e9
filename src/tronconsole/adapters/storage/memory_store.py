from __future__ import annotations

import threading
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, List, Optional

from tronconsole.core.enums import Network, TxStatus, TxType
from tronconsole.core.errors import DuplicateRecordError, NotFoundError
from tronconsole.core.models import PENDING_TX_HASH, Token, Transaction, check_transition
from tronconsole.ports.store_port import StorePort


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MemoryStore(StorePort):
    """Process-memory store. Everything is lost on restart."""

    def __init__(self) -> None:
        self._tokens: Dict[str, Token] = {}
        self._txs: Dict[str, Transaction] = {}
        self._lock = threading.Lock()

    # ---------- tokens ----------

    def list_tokens(self, network: Network) -> List[Token]:
        with self._lock:
            return [replace(t) for t in self._tokens.values() if t.network == network]

    def get_token(self, token_id: str) -> Optional[Token]:
        with self._lock:
            t = self._tokens.get(token_id)
            return replace(t) if t else None

    def get_token_by_address(self, contract_address: str, network: Network) -> Optional[Token]:
        addr = contract_address.lower()
        with self._lock:
            for t in self._tokens.values():
                if t.contract_address.lower() == addr and t.network == network:
                    return replace(t)
        return None

    def create_token(
        self,
        contract_address: str,
        name: str,
        symbol: str,
        decimals: int,
        total_supply: str,
        deployer_address: str,
        network: Network,
    ) -> Token:
        ts = _now()
        token = Token(
            id=str(uuid.uuid4()),
            contract_address=contract_address,
            name=name,
            symbol=symbol,
            decimals=decimals,
            total_supply=total_supply,
            deployer_address=deployer_address,
            network=network,
            deployed_at=ts,
            updated_at=ts,
        )
        with self._lock:
            for t in self._tokens.values():
                if t.network == network and t.contract_address.lower() == contract_address.lower():
                    raise DuplicateRecordError.token(contract_address, network.value)
            self._tokens[token.id] = token
        return replace(token)

    def delete_token(self, token_id: str) -> bool:
        with self._lock:
            return self._tokens.pop(token_id, None) is not None

    def update_token_supply(self, token_id: str, total_supply: str) -> None:
        with self._lock:
            t = self._tokens.get(token_id)
            if t is None:
                raise NotFoundError(f"Token not found: {token_id}")
            t.total_supply = total_supply
            t.updated_at = _now()

    # ---------- transactions ----------

    def list_transactions(self, network: Network, limit: Optional[int] = None) -> List[Transaction]:
        with self._lock:
            # newest insert first so equal timestamps keep recency order
            items = [replace(t) for t in reversed(self._txs.values()) if t.network == network]
        items.sort(key=lambda x: x.timestamp, reverse=True)
        return items[:limit] if limit else items

    def get_transaction(self, tx_id: str) -> Optional[Transaction]:
        with self._lock:
            t = self._txs.get(tx_id)
            return replace(t) if t else None

    def get_transaction_by_hash(self, tx_hash: str) -> Optional[Transaction]:
        if tx_hash == PENDING_TX_HASH:
            return None
        with self._lock:
            for t in self._txs.values():
                if t.tx_hash == tx_hash:
                    return replace(t)
        return None

    def create_transaction(
        self,
        type: TxType,
        network: Network,
        from_address: Optional[str] = None,
        to_address: Optional[str] = None,
        amount: Optional[str] = None,
        token_address: Optional[str] = None,
    ) -> Transaction:
        tx = Transaction(
            id=str(uuid.uuid4()),
            tx_hash=PENDING_TX_HASH,
            type=type,
            status=TxStatus.PENDING,
            network=network,
            timestamp=_now(),
            from_address=from_address,
            to_address=to_address,
            amount=amount,
            token_address=token_address,
        )
        with self._lock:
            self._txs[tx.id] = tx
        return replace(tx)

    def complete_transaction(
        self,
        tx_id: str,
        status: TxStatus,
        tx_hash: Optional[str] = None,
        token_address: Optional[str] = None,
        error: Optional[str] = None,
    ) -> Transaction:
        with self._lock:
            tx = self._txs.get(tx_id)
            if tx is None:
                raise NotFoundError(f"Transaction not found: {tx_id}")
            check_transition(tx.status, status)
            if tx_hash and tx_hash != PENDING_TX_HASH:
                for other in self._txs.values():
                    if other.id != tx_id and other.tx_hash == tx_hash:
                        raise DuplicateRecordError.transaction(tx_hash)
            tx.status = status
            if tx_hash:
                tx.tx_hash = tx_hash
            if token_address:
                tx.token_address = token_address
            if error:
                tx.error = error
            return replace(tx)
