from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional

from tronconsole.core.amounts import format_amount
from tronconsole.core.dto import FeeEstimate, TokenInfo
from tronconsole.core.models import Token, Transaction, WalletConfig
from tronconsole.services.wallet_service import WalletBalances


def _dec_to_str(x: Optional[Decimal]) -> Optional[str]:
    # keep as string for JSON precision safety
    return format_amount(x) if x is not None else None


def wallet_to_dict(w: Optional[WalletConfig]) -> Optional[Dict[str, Any]]:
    # never the private key
    if w is None:
        return None
    return {"address": w.address, "network": w.network.value}


def token_to_dict(t: Token) -> Dict[str, Any]:
    return {
        "id": t.id,
        "contractAddress": t.contract_address,
        "name": t.name,
        "symbol": t.symbol,
        "decimals": t.decimals,
        "totalSupply": t.total_supply,
        "deployerAddress": t.deployer_address,
        "network": t.network.value,
        "deployedAt": t.deployed_at.isoformat(),
        "updatedAt": t.updated_at.isoformat(),
    }


def transaction_to_dict(tx: Transaction) -> Dict[str, Any]:
    return {
        "id": tx.id,
        "txHash": tx.tx_hash,
        "type": tx.type.value,
        "status": tx.status.value,
        "fromAddress": tx.from_address,
        "toAddress": tx.to_address,
        "amount": tx.amount,
        "tokenAddress": tx.token_address,
        "network": tx.network.value,
        "timestamp": tx.timestamp.isoformat(),
        "error": tx.error,
    }


def fee_to_dict(fee: FeeEstimate) -> Dict[str, Any]:
    return {
        "energyRequired": fee.energy_required,
        "bandwidthRequired": fee.bandwidth_required,
        "estimatedTrxCost": str(fee.estimated_trx_cost),
        "estimatedUsdCost": str(fee.estimated_usd_cost) if fee.estimated_usd_cost is not None else None,
    }


def balances_to_dict(b: WalletBalances) -> Dict[str, Any]:
    return {
        "trxBalance": _dec_to_str(b.trx_balance),
        "tokenBalances": [
            {
                "tokenAddress": t.token_address,
                "balance": _dec_to_str(t.balance),
                "symbol": t.symbol,
                "decimals": t.decimals,
            }
            for t in b.token_balances
        ],
    }


def token_info_to_dict(info: TokenInfo) -> Dict[str, Any]:
    return {
        "contractAddress": info.contract_address,
        "name": info.name,
        "symbol": info.symbol,
        "decimals": info.decimals,
        "totalSupply": _dec_to_str(info.total_supply),
    }
