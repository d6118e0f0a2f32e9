from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from typing import Callable, Optional, Tuple

from loguru import logger

from tronconsole.core.enums import Network
from tronconsole.core.errors import WalletNotConnectedError
from tronconsole.core.models import WalletConfig
from tronconsole.ports.chain_gateway_port import ChainGatewayPort


@dataclass(frozen=True)
class ConsoleSession:
    """
    Which network is current and which wallet is active. Passed explicitly
    to every service call; replaced, never mutated.
    """

    network: Network
    wallet: Optional[WalletConfig] = None

    def with_network(self, network: Network) -> "ConsoleSession":
        wallet = replace(self.wallet, network=network) if self.wallet else None
        return ConsoleSession(network=network, wallet=wallet)

    def with_wallet(self, wallet: Optional[WalletConfig]) -> "ConsoleSession":
        return ConsoleSession(network=self.network, wallet=wallet)

    def require_wallet(self) -> WalletConfig:
        if self.wallet is None:
            raise WalletNotConnectedError()
        return self.wallet

    def require_signer(self) -> WalletConfig:
        wallet = self.require_wallet()
        if not wallet.can_sign:
            raise WalletNotConnectedError("Connected wallet has no private key")
        return wallet


class SessionHolder:
    """The console's current session. Last writer wins."""

    def __init__(self, initial: ConsoleSession) -> None:
        self._session = initial
        self._lock = threading.Lock()

    def get(self) -> ConsoleSession:
        with self._lock:
            return self._session

    def set(self, session: ConsoleSession) -> ConsoleSession:
        with self._lock:
            self._session = session
        return session


class GatewayFactory:
    """
    Hands out one gateway per (network, wallet) pair and rebuilds it when
    either changes.
    """

    def __init__(self, build: Callable[[Network], ChainGatewayPort]) -> None:
        self._build = build
        self._key: Optional[Tuple[Network, Optional[str]]] = None
        self._gateway: Optional[ChainGatewayPort] = None
        self._lock = threading.Lock()

    def get(self, network: Network, wallet: Optional[WalletConfig] = None) -> ChainGatewayPort:
        key = (network, wallet.address if wallet else None)
        with self._lock:
            if self._gateway is None or key != self._key:
                logger.debug(f"Building chain gateway for {network.value}")
                self._gateway = self._build(network)
                self._key = key
            return self._gateway

    def for_session(self, session: ConsoleSession) -> ChainGatewayPort:
        return self.get(session.network, session.wallet)
