"""
Request bodies accepted by the HTTP API.

Field names follow the JSON the browser sends (camelCase).
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, Dict, List, Type, TypeVar

from pydantic import AfterValidator, BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from tronconsole.core.enums import Network
from tronconsole.core.errors import ValidationError
from tronconsole.tron import keys

M = TypeVar("M", bound=BaseModel)

_TXID_RE = re.compile(r"^[0-9a-fA-F]{64}$")


def _tron_address(value: str) -> str:
    value = value.strip()
    if not keys.is_address(value):
        raise ValueError("Invalid TRON address")
    return value


def _positive_number(value: str) -> str:
    value = value.strip()
    try:
        num = Decimal(value)
    except InvalidOperation:
        raise ValueError("Must be a number")
    if not num.is_finite() or num <= 0:
        raise ValueError("Must be greater than 0")
    return value


TronAddress = Annotated[str, Field(min_length=1), AfterValidator(_tron_address)]
PositiveAmount = Annotated[str, Field(min_length=1), AfterValidator(_positive_number)]


class SwitchNetworkRequest(BaseModel):
    network: Network


class ImportWalletRequest(BaseModel):
    privateKey: str = Field(min_length=64, max_length=64)


class DeployTokenRequest(BaseModel):
    """
    Constructor arguments. `initialSupply` is a whole-token count; the
    contract scales it by `decimals`.
    """

    name: str = Field(min_length=1, max_length=50)
    symbol: str = Field(min_length=1, max_length=10)
    decimals: int = Field(default=6, ge=0, le=18)
    initialSupply: str = Field(min_length=1)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Token name is required")
        return v.strip()

    @field_validator("symbol")
    @classmethod
    def upper_symbol(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Token symbol is required")
        return v.strip().upper()

    @field_validator("initialSupply")
    @classmethod
    def whole_supply(cls, v: str) -> str:
        v = v.strip()
        if not v.isdigit() or int(v) <= 0:
            raise ValueError("Initial supply must be a positive whole number")
        return str(int(v))


class TransferTokenRequest(BaseModel):
    tokenAddress: TronAddress
    toAddress: TronAddress
    amount: PositiveAmount


class MintTokenRequest(BaseModel):
    tokenAddress: TronAddress
    amount: PositiveAmount


class BurnTokenRequest(MintTokenRequest):
    pass


class ExternalDeploymentRequest(BaseModel):
    txHash: str
    contractAddress: TronAddress
    name: str = Field(min_length=1, max_length=50)
    symbol: str = Field(min_length=1, max_length=10)
    decimals: int = Field(default=6, ge=0, le=18)
    totalSupply: PositiveAmount

    @field_validator("txHash")
    @classmethod
    def hex_txid(cls, v: str) -> str:
        if not _TXID_RE.match(v.strip()):
            raise ValueError("Must be a 64 character hex transaction id")
        return v.strip().lower()

    @field_validator("symbol")
    @classmethod
    def upper_symbol(cls, v: str) -> str:
        return v.strip().upper()


def field_errors(exc: PydanticValidationError) -> List[Dict[str, Any]]:
    return [
        {"field": ".".join(str(p) for p in err["loc"]) or "body", "message": err["msg"]}
        for err in exc.errors()
    ]


def parse_body(model: Type[M], body: Any, message: str = "Invalid parameters") -> M:
    try:
        return model.model_validate(body if isinstance(body, dict) else {})
    except PydanticValidationError as e:
        raise ValidationError(message, field_errors(e)) from e
