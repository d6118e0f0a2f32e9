"""TRON key and address helpers (secp256k1 keys, base58check addresses)."""

from __future__ import annotations

import re

import base58
from eth_account import Account
from eth_keys import keys as eth_keys
from eth_utils import keccak

from tronconsole.core.errors import ValidationError

ADDRESS_PREFIX = b"\x41"
PRIVATE_KEY_RE = re.compile(r"^[0-9a-fA-F]{64}$")


def _strip_0x(value: str) -> str:
    return value[2:] if value.startswith(("0x", "0X")) else value


def is_private_key(value: str) -> bool:
    return bool(value) and bool(PRIVATE_KEY_RE.match(value))


def generate_private_key() -> str:
    acct = Account.create()
    return _strip_0x(acct.key.hex())


def private_key_to_address(private_key: str) -> str:
    if not is_private_key(private_key):
        raise ValidationError("Invalid private key")
    pk = eth_keys.PrivateKey(bytes.fromhex(private_key))
    raw = ADDRESS_PREFIX + keccak(pk.public_key.to_bytes())[-20:]
    return base58.b58encode_check(raw).decode("ascii")


def sign_txid(txid: str, private_key: str) -> str:
    """65-byte r||s||v signature over the transaction id, hex encoded."""
    pk = eth_keys.PrivateKey(bytes.fromhex(private_key))
    return pk.sign_msg_hash(bytes.fromhex(txid)).to_bytes().hex()


def is_address(address: str) -> bool:
    try:
        raw = base58.b58decode_check(address)
    except Exception:
        return False
    return len(raw) == 21 and raw[:1] == ADDRESS_PREFIX


def to_hex_address(address: str) -> str:
    """base58 `T...` -> `41...` hex."""
    if not is_address(address):
        raise ValidationError(f"Invalid TRON address: {address}")
    return base58.b58decode_check(address).hex()


def to_base58_address(hex_address: str) -> str:
    """`41...` (or 20-byte `0x...`) hex -> base58 `T...`."""
    raw = bytes.fromhex(_strip_0x(hex_address))
    if len(raw) == 20:
        raw = ADDRESS_PREFIX + raw
    if len(raw) != 21 or raw[:1] != ADDRESS_PREFIX:
        raise ValidationError(f"Invalid hex address: {hex_address}")
    return base58.b58encode_check(raw).decode("ascii")


def to_abi_address(address: str) -> str:
    # ABI words carry the 20-byte body without the 0x41 prefix
    return "0x" + to_hex_address(address)[2:]


def same_address(a: str, b: str) -> bool:
    return (a or "").lower() == (b or "").lower()
