from decimal import Decimal
from typing import Any, Dict, List, Optional


class ConsoleError(Exception):
    pass


class ValidationError(ConsoleError):
    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class WalletNotConnectedError(ConsoleError):
    def __init__(self, message: str = "No wallet connected") -> None:
        super().__init__(message)


class NotTokenOwnerError(ConsoleError):
    pass


class InsufficientBalanceError(ConsoleError):
    def __init__(self, message: str, balance: Decimal, required: Decimal) -> None:
        super().__init__(message)
        self.balance = balance
        self.required = required


class NotFoundError(ConsoleError):
    pass


class InvalidStatusTransition(ConsoleError):
    pass


class ContractArtifactError(ConsoleError):
    pass


class DataSourceError(ConsoleError):
    pass


class RateLimitError(DataSourceError):
    pass


class ChainError(DataSourceError):
    """Node accepted the request but the transaction was rejected or failed."""


class DuplicateRecordError(ValidationError):
    """Contract address already listed on the network, or tx hash already settled."""

    @classmethod
    def token(cls, contract_address: str, network: str) -> "DuplicateRecordError":
        return cls(
            "Token already recorded",
            [{"field": "contractAddress", "message": f"{contract_address} already recorded on {network}"}],
        )

    @classmethod
    def transaction(cls, tx_hash: str) -> "DuplicateRecordError":
        return cls("Transaction already recorded", [{"field": "txHash", "message": f"{tx_hash} already recorded"}])
