from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from flask import Flask, jsonify
from loguru import logger
from werkzeug.exceptions import HTTPException

from tronconsole.adapters.chain.static_chain_adapter import StaticChainAdapter
from tronconsole.adapters.chain.trongrid_adapter import TronGridChainAdapter
from tronconsole.adapters.pricing.price_adapter import FixedPriceAdapter
from tronconsole.adapters.storage.memory_store import MemoryStore
from tronconsole.adapters.storage.sql_store import SqlStore
from tronconsole.api.routes import bp
from tronconsole.config import settings
from tronconsole.core.amounts import format_amount
from tronconsole.core.enums import Network
from tronconsole.core.errors import (
    ConsoleError,
    InsufficientBalanceError,
    NotFoundError,
    NotTokenOwnerError,
    ValidationError,
    WalletNotConnectedError,
)
from tronconsole.ports.chain_gateway_port import ChainGatewayPort
from tronconsole.ports.price_port import PricePort
from tronconsole.ports.store_port import StorePort
from tronconsole.services.fee_service import FeeService
from tronconsole.services.session import ConsoleSession, GatewayFactory, SessionHolder
from tronconsole.services.token_service import TokenService
from tronconsole.services.wallet_service import WalletService


@dataclass
class Console:
    sessions: SessionHolder
    wallets: WalletService
    tokens: TokenService
    default_tx_limit: int = settings.TRANSACTIONS_DEFAULT_LIMIT


def build_console(
    network: Network = Network(settings.DEFAULT_NETWORK),
    store: Optional[StorePort] = None,
    chain: Optional[ChainGatewayPort] = None,
    price: Optional[PricePort] = None,
) -> Console:
    """
    Wire the services. A fixed `chain` (e.g. StaticChainAdapter) is shared by
    both networks; otherwise a TronGrid client is built per network/wallet.
    """
    store = store or MemoryStore()
    if chain is not None:
        gateways = GatewayFactory(lambda _network: chain)
    else:
        gateways = GatewayFactory(TronGridChainAdapter)
    fees = FeeService(price or FixedPriceAdapter())

    return Console(
        sessions=SessionHolder(ConsoleSession(network=network)),
        wallets=WalletService(gateways, store),
        tokens=TokenService(store, gateways, fees),
    )


def make_store(backend: str, database_url: str) -> StorePort:
    if backend == "memory":
        return MemoryStore()
    if backend == "sql":
        return SqlStore(database_url)
    raise ValueError(f"Unknown store backend: {backend}")


def make_chain(use_static: bool) -> Optional[ChainGatewayPort]:
    return StaticChainAdapter(starting_trx=settings.STATIC_STARTING_TRX) if use_static else None


def _register_error_handlers(app: Flask) -> None:

    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        body = {"message": str(e)}
        if e.errors:
            body["errors"] = e.errors
        return jsonify(body), 400

    @app.errorhandler(InsufficientBalanceError)
    def _insufficient(e: InsufficientBalanceError):
        return jsonify({
            "message": str(e),
            "balance": format_amount(e.balance),
            "required": format_amount(e.required),
        }), 400

    @app.errorhandler(WalletNotConnectedError)
    def _no_wallet(e: WalletNotConnectedError):
        return jsonify({"message": str(e)}), 401

    @app.errorhandler(NotTokenOwnerError)
    def _not_owner(e: NotTokenOwnerError):
        return jsonify({"message": str(e)}), 403

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return jsonify({"message": str(e)}), 404

    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        return jsonify({"message": e.description}), e.code

    @app.errorhandler(ConsoleError)
    def _console_error(e: ConsoleError):
        logger.error(f"{e.__class__.__name__}: {e}")
        return jsonify({"message": str(e)}), 500

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        logger.exception(f"Unhandled error: {e}")
        return jsonify({"message": str(e)}), 500


def create_app(console: Optional[Console] = None) -> Flask:
    app = Flask(__name__)
    app.extensions["tronconsole"] = console or build_console(
        store=make_store(settings.STORE_BACKEND, settings.DATABASE_URL)
    )
    app.register_blueprint(bp)
    _register_error_handlers(app)
    return app
