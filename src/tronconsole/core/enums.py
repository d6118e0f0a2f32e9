from enum import Enum


class Network(str, Enum):
    TESTNET = "testnet"
    MAINNET = "mainnet"


class TxType(str, Enum):
    DEPLOY = "deploy"
    TRANSFER = "transfer"
    MINT = "mint"
    BURN = "burn"


class TxStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not TxStatus.PENDING
