from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import List

from loguru import logger

from tronconsole.core.dto import TokenBalance
from tronconsole.core.errors import ConsoleError, ValidationError
from tronconsole.core.models import WalletConfig
from tronconsole.ports.store_port import StorePort
from tronconsole.services.session import ConsoleSession, GatewayFactory
from tronconsole.tron import keys


@dataclass(frozen=True)
class WalletBalances:
    trx_balance: Decimal
    token_balances: List[TokenBalance]


class WalletService:
    """Create, import and drop the console's single wallet."""

    def __init__(self, gateways: GatewayFactory, store: StorePort) -> None:
        self.gateways = gateways
        self.store = store

    def create(self, session: ConsoleSession) -> ConsoleSession:
        chain = self.gateways.get(session.network)
        account = chain.create_account()
        logger.info(f"Created wallet {account.address} on {session.network.value}")
        return session.with_wallet(
            WalletConfig(address=account.address, network=session.network, private_key=account.private_key)
        )

    def import_key(self, session: ConsoleSession, private_key: str) -> ConsoleSession:
        private_key = private_key.strip()
        if private_key.lower().startswith("0x"):
            private_key = private_key[2:]
        if not keys.is_private_key(private_key):
            raise ValidationError("Invalid private key", [{"field": "privateKey", "message": "Invalid private key"}])

        address = self.gateways.get(session.network).address_from_private_key(private_key)
        logger.info(f"Imported wallet {address} on {session.network.value}")
        return session.with_wallet(WalletConfig(address=address, network=session.network, private_key=private_key))

    def disconnect(self, session: ConsoleSession) -> ConsoleSession:
        if session.wallet:
            logger.info(f"Disconnected wallet {session.wallet.address}")
        return session.with_wallet(None)

    def balances(self, session: ConsoleSession) -> WalletBalances:
        wallet = session.require_wallet()
        chain = self.gateways.for_session(session)
        trx = chain.get_trx_balance(wallet.address)

        tokens: List[TokenBalance] = []
        for t in self.store.list_tokens(session.network):
            try:
                bal = chain.get_token_balance(t.contract_address, wallet.address)
            except ConsoleError as e:
                logger.warning(f"Skipping balance of {t.symbol} ({t.contract_address}): {e}")
                continue
            tokens.append(TokenBalance(t.contract_address, t.symbol, t.decimals, bal))

        return WalletBalances(trx_balance=trx, token_balances=tokens)
