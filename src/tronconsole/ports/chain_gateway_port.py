from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Dict, Optional

from tronconsole.core.dto import ChainFeeParams, DeployParams, DeployResult, NewAccount, TokenInfo


class ChainGatewayPort(ABC):
    """
    Abstract Class for everything the console asks of a TRON node.

    Amounts passed to transfer/mint/burn are integer base units; amounts
    returned by balance reads are token (or TRX) units.
    """

    # --- Keys ---

    @abstractmethod
    def create_account(self) -> NewAccount:
        raise NotImplementedError

    @abstractmethod
    def address_from_private_key(self, private_key: str) -> str:
        raise NotImplementedError

    # --- Native currency / resources ---

    @abstractmethod
    def get_trx_balance(self, address: str) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    def get_chain_fee_params(self) -> ChainFeeParams:
        raise NotImplementedError

    # --- Contract writes ---

    @abstractmethod
    def deploy_token(self, params: DeployParams, private_key: str) -> DeployResult:
        raise NotImplementedError

    @abstractmethod
    def transfer_token(self, token_address: str, to_address: str, amount: int, private_key: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def mint_token(self, token_address: str, amount: int, private_key: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def burn_token(self, token_address: str, amount: int, private_key: str) -> str:
        raise NotImplementedError

    # --- Contract reads ---

    @abstractmethod
    def get_token_balance(self, token_address: str, holder_address: str) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    def get_token_decimals(self, token_address: str) -> int:
        raise NotImplementedError

    @abstractmethod
    def get_token_info(self, token_address: str) -> TokenInfo:
        raise NotImplementedError

    @abstractmethod
    def get_token_owner(self, token_address: str) -> str:
        raise NotImplementedError

    # --- Receipts ---

    @abstractmethod
    def get_transaction_info(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError
