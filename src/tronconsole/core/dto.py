from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class ChainFeeParams:
    energy_fee_sun: int          # sun per energy unit
    transaction_fee_sun: int     # sun per bandwidth byte


@dataclass(frozen=True)
class FeeEstimate:
    energy_required: int
    bandwidth_required: int
    estimated_trx_cost: Decimal
    estimated_usd_cost: Optional[Decimal] = None


@dataclass(frozen=True)
class DeployParams:
    name: str
    symbol: str
    decimals: int
    initial_supply: str          # whole tokens, passed to the constructor as-is


@dataclass(frozen=True)
class DeployResult:
    tx_hash: str
    contract_address: str        # base58


@dataclass(frozen=True)
class TokenInfo:
    contract_address: str
    name: str
    symbol: str
    decimals: int
    total_supply: Decimal        # token units


@dataclass(frozen=True)
class TokenBalance:
    token_address: str
    symbol: str
    decimals: int
    balance: Decimal


@dataclass(frozen=True)
class NewAccount:
    address: str
    private_key: str             # 64 hex chars
