from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from tronconsole.core.enums import Network, TxStatus, TxType
from tronconsole.core.models import Token, Transaction


class StorePort(ABC):
    """
    Token and transaction records, keyed by generated ids.

    Listings are always scoped to one network. Transactions are created
    pending and completed exactly once.
    """

    # --- Tokens ---

    @abstractmethod
    def list_tokens(self, network: Network) -> List[Token]:
        raise NotImplementedError

    @abstractmethod
    def get_token(self, token_id: str) -> Optional[Token]:
        raise NotImplementedError

    @abstractmethod
    def get_token_by_address(self, contract_address: str, network: Network) -> Optional[Token]:
        raise NotImplementedError

    @abstractmethod
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
        raise NotImplementedError

    @abstractmethod
    def delete_token(self, token_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def update_token_supply(self, token_id: str, total_supply: str) -> None:
        raise NotImplementedError

    # --- Transactions ---

    @abstractmethod
    def list_transactions(self, network: Network, limit: Optional[int] = None) -> List[Transaction]:
        raise NotImplementedError

    @abstractmethod
    def get_transaction(self, tx_id: str) -> Optional[Transaction]:
        raise NotImplementedError

    @abstractmethod
    def get_transaction_by_hash(self, tx_hash: str) -> Optional[Transaction]:
        raise NotImplementedError

    @abstractmethod
    def create_transaction(
        self,
        type: TxType,
        network: Network,
        from_address: Optional[str] = None,
        to_address: Optional[str] = None,
        amount: Optional[str] = None,
        token_address: Optional[str] = None,
    ) -> Transaction:
        raise NotImplementedError

    @abstractmethod
    def complete_transaction(
        self,
        tx_id: str,
        status: TxStatus,
        tx_hash: Optional[str] = None,
        token_address: Optional[str] = None,
        error: Optional[str] = None,
    ) -> Transaction:
        raise NotImplementedError
