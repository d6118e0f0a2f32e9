from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple

from loguru import logger

from tronconsole.core.amounts import format_amount, parse_amount, to_base_units
from tronconsole.core.dto import DeployParams, FeeEstimate, TokenInfo
from tronconsole.core.enums import TxStatus, TxType
from tronconsole.core.errors import (
    ConsoleError,
    DuplicateRecordError,
    InsufficientBalanceError,
    NotFoundError,
    NotTokenOwnerError,
)
from tronconsole.core.models import PENDING_TX_HASH, Token, Transaction, WalletConfig
from tronconsole.ports.chain_gateway_port import ChainGatewayPort
from tronconsole.ports.store_port import StorePort
from tronconsole.services.fee_service import FeeKind, FeeService
from tronconsole.services.session import ConsoleSession, GatewayFactory
from tronconsole.tron import keys
from tronconsole.tron.receipts import failure_reason


@dataclass(frozen=True)
class ExternalDeployment:
    tx_hash: str
    contract_address: str
    name: str
    symbol: str
    decimals: int
    total_supply: str


class TokenService:
    """
    Deploy / transfer / mint / burn sequencing.

    Every write follows the same order: authorize, check balances, record a
    pending transaction, submit, then mark it confirmed or failed. Nothing
    is recorded when a check fails, and nothing is retried.
    """

    def __init__(self, store: StorePort, gateways: GatewayFactory, fees: FeeService) -> None:
        self.store = store
        self.gateways = gateways
        self.fees = fees

    # ---------- reads ----------

    def list_tokens(self, session: ConsoleSession) -> List[Token]:
        return self.store.list_tokens(session.network)

    def list_transactions(self, session: ConsoleSession, limit: Optional[int] = None) -> List[Transaction]:
        return self.store.list_transactions(session.network, limit)

    def estimate_deploy_fee(self, session: ConsoleSession) -> FeeEstimate:
        return self.fees.estimate(self.gateways.for_session(session), session.network, FeeKind.DEPLOY)

    def get_token_info(self, session: ConsoleSession, token_address: str) -> TokenInfo:
        return self.gateways.for_session(session).get_token_info(token_address)

    def refresh_transaction(self, session: ConsoleSession, tx_id: str) -> Tuple[Transaction, Optional[Dict[str, Any]]]:
        """Read the on-chain receipt of a stored transaction; settle it if still pending."""
        tx = self.store.get_transaction(tx_id)
        if tx is None:
            raise NotFoundError(f"Transaction not found: {tx_id}")
        if tx.tx_hash == PENDING_TX_HASH:
            return tx, None

        receipt = self.gateways.get(tx.network, session.wallet).get_transaction_info(tx.tx_hash)
        if receipt and tx.status is TxStatus.PENDING:
            reason = failure_reason(receipt)
            if reason:
                tx = self.store.complete_transaction(tx.id, TxStatus.FAILED, error=reason)
            else:
                tx = self.store.complete_transaction(tx.id, TxStatus.CONFIRMED)
        return tx, receipt

    def delete_token(self, session: ConsoleSession, token_id: str) -> None:
        if not self.store.delete_token(token_id):
            raise NotFoundError(f"Token not found: {token_id}")
        logger.info(f"Removed token {token_id} from {session.network.value} list")

    # ---------- checks ----------

    def _check_trx(self, chain: ChainGatewayPort, session: ConsoleSession, wallet: WalletConfig,
                   kind: FeeKind, what: str) -> None:
        balance = chain.get_trx_balance(wallet.address)
        fee = self.fees.estimate(chain, session.network, kind)
        required = fee.estimated_trx_cost
        if balance < required:
            raise InsufficientBalanceError(
                f"Insufficient TRX balance {what}. You have {format_amount(balance)} TRX "
                f"but need approximately {required} TRX.",
                balance=balance,
                required=required,
            )

    @staticmethod
    def _check_tokens(chain: ChainGatewayPort, wallet: WalletConfig, token_address: str,
                      amount: Decimal, verb: str) -> None:
        balance = chain.get_token_balance(token_address, wallet.address)
        if balance < amount:
            raise InsufficientBalanceError(
                f"Insufficient token balance{' to burn' if verb == 'burn' else ''}. "
                f"You have {format_amount(balance)} tokens but trying to {verb} {format_amount(amount)} tokens.",
                balance=balance,
                required=amount,
            )

    @staticmethod
    def _is_owner(chain: ChainGatewayPort, token_address: str, address: str) -> bool:
        try:
            owner = chain.get_token_owner(token_address)
        except ConsoleError as e:
            logger.warning(f"Could not read owner of {token_address}: {e}")
            return False
        return keys.same_address(owner, address)

    def _require_owner(self, chain: ChainGatewayPort, token_address: str, wallet: WalletConfig, verb: str) -> None:
        if not self._is_owner(chain, token_address, wallet.address):
            raise NotTokenOwnerError(
                f"Only the token owner can {verb} tokens. You are not the owner of this token."
            )

    # ---------- submission ----------

    def _submit(self, tx: Transaction, send: Callable[[], str]) -> Transaction:
        try:
            tx_hash = send()
        except Exception as e:
            logger.error(f"{tx.type.value} {tx.id} failed: {e}")
            self.store.complete_transaction(tx.id, TxStatus.FAILED, error=str(e))
            raise
        done = self.store.complete_transaction(tx.id, TxStatus.CONFIRMED, tx_hash=tx_hash)
        logger.info(f"{tx.type.value} confirmed: {tx_hash}")
        return done

    def _adjust_supply(self, session: ConsoleSession, token_address: str, delta: Decimal) -> None:
        token = self.store.get_token_by_address(token_address, session.network)
        if token is None:
            return
        new_supply = Decimal(token.total_supply) + delta
        self.store.update_token_supply(token.id, format_amount(new_supply))

    # ---------- writes ----------

    def deploy(self, session: ConsoleSession, params: DeployParams) -> Tuple[Token, str]:
        wallet = session.require_signer()
        chain = self.gateways.for_session(session)

        self._check_trx(chain, session, wallet, FeeKind.DEPLOY, "for deployment")

        tx = self.store.create_transaction(TxType.DEPLOY, session.network, from_address=wallet.address)
        try:
            result = chain.deploy_token(params, wallet.private_key)
        except Exception as e:
            logger.error(f"deploy {tx.id} failed: {e}")
            self.store.complete_transaction(tx.id, TxStatus.FAILED, error=str(e))
            raise

        self.store.complete_transaction(
            tx.id, TxStatus.CONFIRMED, tx_hash=result.tx_hash, token_address=result.contract_address
        )
        token = self.store.create_token(
            contract_address=result.contract_address,
            name=params.name,
            symbol=params.symbol,
            decimals=params.decimals,
            total_supply=params.initial_supply,
            deployer_address=wallet.address,
            network=session.network,
        )
        logger.info(f"Deployed {token.symbol} at {token.contract_address} on {session.network.value}")
        return token, result.tx_hash

    def record_external_deployment(self, session: ConsoleSession, dep: ExternalDeployment) -> Tuple[Token, str]:
        """Record a deployment signed outside the console (browser wallet)."""
        wallet = session.require_wallet()
        if self.store.get_token_by_address(dep.contract_address, session.network):
            raise DuplicateRecordError.token(dep.contract_address, session.network.value)
        if self.store.get_transaction_by_hash(dep.tx_hash):
            raise DuplicateRecordError.transaction(dep.tx_hash)

        tx = self.store.create_transaction(TxType.DEPLOY, session.network, from_address=wallet.address)
        self.store.complete_transaction(
            tx.id, TxStatus.CONFIRMED, tx_hash=dep.tx_hash, token_address=dep.contract_address
        )
        token = self.store.create_token(
            contract_address=dep.contract_address,
            name=dep.name,
            symbol=dep.symbol,
            decimals=dep.decimals,
            total_supply=dep.total_supply,
            deployer_address=wallet.address,
            network=session.network,
        )
        return token, dep.tx_hash

    def transfer(self, session: ConsoleSession, token_address: str, to_address: str, amount: str) -> str:
        wallet = session.require_signer()
        value = parse_amount(amount)
        chain = self.gateways.for_session(session)
        base_units = to_base_units(value, chain.get_token_decimals(token_address))

        self._check_trx(chain, session, wallet, FeeKind.TRANSFER, "for transaction fees")
        self._check_tokens(chain, wallet, token_address, value, "transfer")

        tx = self.store.create_transaction(
            TxType.TRANSFER,
            session.network,
            from_address=wallet.address,
            to_address=to_address,
            amount=amount,
            token_address=token_address,
        )
        done = self._submit(
            tx, lambda: chain.transfer_token(token_address, to_address, base_units, wallet.private_key)
        )
        return done.tx_hash

    def mint(self, session: ConsoleSession, token_address: str, amount: str) -> str:
        wallet = session.require_signer()
        value = parse_amount(amount)
        chain = self.gateways.for_session(session)

        self._require_owner(chain, token_address, wallet, "mint")
        base_units = to_base_units(value, chain.get_token_decimals(token_address))
        self._check_trx(chain, session, wallet, FeeKind.MINT_BURN, "for transaction fees")

        tx = self.store.create_transaction(
            TxType.MINT, session.network, from_address=wallet.address, amount=amount, token_address=token_address
        )
        done = self._submit(tx, lambda: chain.mint_token(token_address, base_units, wallet.private_key))
        self._adjust_supply(session, token_address, value)
        return done.tx_hash

    def burn(self, session: ConsoleSession, token_address: str, amount: str) -> str:
        wallet = session.require_signer()
        value = parse_amount(amount)
        chain = self.gateways.for_session(session)

        self._require_owner(chain, token_address, wallet, "burn")
        base_units = to_base_units(value, chain.get_token_decimals(token_address))
        self._check_trx(chain, session, wallet, FeeKind.MINT_BURN, "for transaction fees")
        self._check_tokens(chain, wallet, token_address, value, "burn")

        tx = self.store.create_transaction(
            TxType.BURN, session.network, from_address=wallet.address, amount=amount, token_address=token_address
        )
        done = self._submit(tx, lambda: chain.burn_token(token_address, base_units, wallet.private_key))
        self._adjust_supply(session, token_address, -value)
        return done.tx_hash
