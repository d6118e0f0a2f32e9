from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from loguru import logger
from sqlalchemy import Column, DateTime, Index, Integer, String, Text, UniqueConstraint, create_engine, func, select
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from tronconsole.core.enums import Network, TxStatus, TxType
from tronconsole.core.errors import DuplicateRecordError, NotFoundError
from tronconsole.core.models import PENDING_TX_HASH, Token, Transaction, check_transition
from tronconsole.ports.store_port import StorePort

Base = declarative_base()


class TokenRow(Base):
    __tablename__ = "tokens"
    id = Column(String(36), primary_key=True)
    contract_address = Column(String(64), nullable=False)
    name = Column(String(50), nullable=False)
    symbol = Column(String(10), nullable=False)
    decimals = Column(Integer, nullable=False)
    total_supply = Column(Text, nullable=False)
    deployer_address = Column(String(64), nullable=False)
    network = Column(String(16), nullable=False, index=True)
    deployed_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (UniqueConstraint("contract_address", "network", name="_token_address_network_uc"),)


class TransactionRow(Base):
    __tablename__ = "transactions"
    id = Column(String(36), primary_key=True)
    seq = Column(Integer, nullable=False, index=True)
    tx_hash = Column(String(80), nullable=False, index=True)
    type = Column(String(16), nullable=False)
    status = Column(String(16), nullable=False)
    from_address = Column(String(64))
    to_address = Column(String(64))
    amount = Column(Text)
    token_address = Column(String(64))
    network = Column(String(16), nullable=False, index=True)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    error = Column(Text)

    # settled hashes are unique; many rows may still read "pending"
    __table_args__ = (
        Index(
            "uq_transactions_settled_hash",
            tx_hash,
            unique=True,
            sqlite_where=tx_hash != PENDING_TX_HASH,
            postgresql_where=tx_hash != PENDING_TX_HASH,
        ),
    )


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _aware(ts: datetime) -> datetime:
    # sqlite drops tzinfo on the way back
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def _token(row: TokenRow) -> Token:
    return Token(
        id=row.id,
        contract_address=row.contract_address,
        name=row.name,
        symbol=row.symbol,
        decimals=row.decimals,
        total_supply=row.total_supply,
        deployer_address=row.deployer_address,
        network=Network(row.network),
        deployed_at=_aware(row.deployed_at),
        updated_at=_aware(row.updated_at),
    )


def _tx(row: TransactionRow) -> Transaction:
    return Transaction(
        id=row.id,
        tx_hash=row.tx_hash,
        type=TxType(row.type),
        status=TxStatus(row.status),
        network=Network(row.network),
        timestamp=_aware(row.timestamp),
        from_address=row.from_address,
        to_address=row.to_address,
        amount=row.amount,
        token_address=row.token_address,
        error=row.error,
    )


class SqlStore(StorePort):
    """
    SQLAlchemy-backed store. Any SQLAlchemy URL works; sqlite is the default.
    Private keys never reach this store.
    """

    def __init__(self, database_url: str) -> None:
        kwargs = {}
        if database_url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if database_url in ("sqlite://", "sqlite:///:memory:"):
                kwargs["poolclass"] = StaticPool
        self._engine = create_engine(database_url, **kwargs)
        self._Session = sessionmaker(self._engine, expire_on_commit=False)
        Base.metadata.create_all(self._engine)
        logger.info(f"SQL store ready: {self._engine.url.render_as_string(hide_password=True)}")

    # ---------- tokens ----------

    def list_tokens(self, network: Network) -> List[Token]:
        with self._Session() as s:
            rows = s.scalars(
                select(TokenRow).where(TokenRow.network == network.value).order_by(TokenRow.deployed_at)
            ).all()
            return [_token(r) for r in rows]

    def get_token(self, token_id: str) -> Optional[Token]:
        with self._Session() as s:
            row = s.get(TokenRow, token_id)
            return _token(row) if row else None

    def get_token_by_address(self, contract_address: str, network: Network) -> Optional[Token]:
        with self._Session() as s:
            row = s.scalars(
                select(TokenRow).where(
                    func.lower(TokenRow.contract_address) == contract_address.lower(),
                    TokenRow.network == network.value,
                )
            ).first()
            return _token(row) if row else None

    def create_token(
        self,
        contract_address: str,
        name: str,
        symbol: str,
        decimals: int,
        total_supply: str,
        deployer_address: str,
        network: Network,
    ) -> Token:
        ts = _now()
        row = TokenRow(
            id=str(uuid.uuid4()),
            contract_address=contract_address,
            name=name,
            symbol=symbol,
            decimals=decimals,
            total_supply=total_supply,
            deployer_address=deployer_address,
            network=network.value,
            deployed_at=ts,
            updated_at=ts,
        )
        with self._Session.begin() as s:
            taken = s.scalars(
                select(TokenRow.id).where(
                    func.lower(TokenRow.contract_address) == contract_address.lower(),
                    TokenRow.network == network.value,
                )
            ).first()
            if taken:
                raise DuplicateRecordError.token(contract_address, network.value)
            s.add(row)
        return _token(row)

    def delete_token(self, token_id: str) -> bool:
        with self._Session.begin() as s:
            row = s.get(TokenRow, token_id)
            if row is None:
                return False
            s.delete(row)
            return True

    def update_token_supply(self, token_id: str, total_supply: str) -> None:
        with self._Session.begin() as s:
            row = s.get(TokenRow, token_id)
            if row is None:
                raise NotFoundError(f"Token not found: {token_id}")
            row.total_supply = total_supply
            row.updated_at = _now()

    # ---------- transactions ----------

    def list_transactions(self, network: Network, limit: Optional[int] = None) -> List[Transaction]:
        stmt = (
            select(TransactionRow)
            .where(TransactionRow.network == network.value)
            .order_by(TransactionRow.timestamp.desc(), TransactionRow.seq.desc())
        )
        if limit:
            stmt = stmt.limit(limit)
        with self._Session() as s:
            return [_tx(r) for r in s.scalars(stmt).all()]

    def get_transaction(self, tx_id: str) -> Optional[Transaction]:
        with self._Session() as s:
            row = s.get(TransactionRow, tx_id)
            return _tx(row) if row else None

    def get_transaction_by_hash(self, tx_hash: str) -> Optional[Transaction]:
        if tx_hash == PENDING_TX_HASH:
            return None
        with self._Session() as s:
            row = s.scalars(select(TransactionRow).where(TransactionRow.tx_hash == tx_hash)).first()
            return _tx(row) if row else None

    def create_transaction(
        self,
        type: TxType,
        network: Network,
        from_address: Optional[str] = None,
        to_address: Optional[str] = None,
        amount: Optional[str] = None,
        token_address: Optional[str] = None,
    ) -> Transaction:
        with self._Session.begin() as s:
            seq = (s.scalar(select(func.max(TransactionRow.seq))) or 0) + 1
            row = TransactionRow(
                id=str(uuid.uuid4()),
                seq=seq,
                tx_hash=PENDING_TX_HASH,
                type=type.value,
                status=TxStatus.PENDING.value,
                from_address=from_address,
                to_address=to_address,
                amount=amount,
                token_address=token_address,
                network=network.value,
                timestamp=_now(),
            )
            s.add(row)
        return _tx(row)

    def complete_transaction(
        self,
        tx_id: str,
        status: TxStatus,
        tx_hash: Optional[str] = None,
        token_address: Optional[str] = None,
        error: Optional[str] = None,
    ) -> Transaction:
        with self._Session.begin() as s:
            row = s.get(TransactionRow, tx_id)
            if row is None:
                raise NotFoundError(f"Transaction not found: {tx_id}")
            check_transition(TxStatus(row.status), status)
            if tx_hash and tx_hash != PENDING_TX_HASH:
                clash = s.scalars(
                    select(TransactionRow.id).where(TransactionRow.tx_hash == tx_hash, TransactionRow.id != tx_id)
                ).first()
                if clash:
                    raise DuplicateRecordError.transaction(tx_hash)
            row.status = status.value
            if tx_hash:
                row.tx_hash = tx_hash
            if token_address:
                row.token_address = token_address
            if error:
                row.error = error
        return _tx(row)
