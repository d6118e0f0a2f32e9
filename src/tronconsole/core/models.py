from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from tronconsole.core.enums import Network, TxStatus, TxType
from tronconsole.core.errors import InvalidStatusTransition


# placeholder hash until the node returns a txID
PENDING_TX_HASH = "pending"


# Wallet

@dataclass(frozen=True)
class WalletConfig:
    """
    The single active key pair. The private key is absent for watch-only
    wallets and is never serialized back to clients.
    """

    address: str
    network: Network
    private_key: Optional[str] = None

    @property
    def can_sign(self) -> bool:
        return bool(self.private_key)


# Store records

@dataclass
class Token:

    id: str
    contract_address: str
    name: str
    symbol: str
    decimals: int
    total_supply: str           # decimal string, token units
    deployer_address: str
    network: Network
    deployed_at: datetime
    updated_at: datetime


@dataclass
class Transaction:

    id: str
    tx_hash: str
    type: TxType
    status: TxStatus
    network: Network
    timestamp: datetime

    from_address: Optional[str] = None
    to_address: Optional[str] = None
    amount: Optional[str] = None
    token_address: Optional[str] = None
    error: Optional[str] = None


def check_transition(current: TxStatus, new: TxStatus) -> None:
    # pending -> confirmed | failed, nothing else
    if current is not TxStatus.PENDING or not new.is_terminal:
        raise InvalidStatusTransition(f"Cannot move transaction from {current.value} to {new.value}")
