from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from tronconsole.api.requests import (
    BurnTokenRequest,
    DeployTokenRequest,
    ExternalDeploymentRequest,
    ImportWalletRequest,
    MintTokenRequest,
    SwitchNetworkRequest,
    TransferTokenRequest,
    parse_body,
)
from tronconsole.core.dto import DeployParams
from tronconsole.core.errors import ValidationError
from tronconsole.io.schemas import (
    balances_to_dict,
    fee_to_dict,
    token_info_to_dict,
    token_to_dict,
    transaction_to_dict,
    wallet_to_dict,
)
from tronconsole.services.token_service import ExternalDeployment

bp = Blueprint("api", __name__, url_prefix="/api")

# the browser client appends the selected network to list URLs; the session network wins
NETWORK_SEGMENT = "<any(testnet, mainnet):network>"


def _console():
    return current_app.extensions["tronconsole"]


def _body():
    return request.get_json(silent=True)


# ---------- network ----------

@bp.get("/network")
def get_network():
    return jsonify({"network": _console().sessions.get().network.value})


@bp.post("/network/switch")
def switch_network():
    c = _console()
    req = parse_body(SwitchNetworkRequest, _body(), message="Invalid network")
    session = c.sessions.set(c.sessions.get().with_network(req.network))
    return jsonify({"network": session.network.value})


# ---------- wallet ----------

@bp.get("/wallet")
def get_wallet():
    return jsonify(wallet_to_dict(_console().sessions.get().wallet))


@bp.post("/wallet/create")
def create_wallet():
    c = _console()
    session = c.sessions.set(c.wallets.create(c.sessions.get()))
    return jsonify(wallet_to_dict(session.wallet))


@bp.post("/wallet/import")
def import_wallet():
    c = _console()
    req = parse_body(ImportWalletRequest, _body(), message="Invalid private key")
    session = c.sessions.set(c.wallets.import_key(c.sessions.get(), req.privateKey))
    return jsonify(wallet_to_dict(session.wallet))


@bp.post("/wallet/disconnect")
def disconnect_wallet():
    c = _console()
    c.sessions.set(c.wallets.disconnect(c.sessions.get()))
    return jsonify({"success": True})


@bp.get("/wallet/balance")
@bp.get(f"/wallet/balance/{NETWORK_SEGMENT}")
def wallet_balance(network=None):
    c = _console()
    return jsonify(balances_to_dict(c.wallets.balances(c.sessions.get())))


# ---------- tokens ----------

@bp.get("/tokens")
@bp.get(f"/tokens/{NETWORK_SEGMENT}")
def list_tokens(network=None):
    c = _console()
    return jsonify([token_to_dict(t) for t in c.tokens.list_tokens(c.sessions.get())])


@bp.get("/tokens/info/<address>")
def token_info(address: str):
    c = _console()
    return jsonify(token_info_to_dict(c.tokens.get_token_info(c.sessions.get(), address)))


@bp.delete("/tokens/<token_id>")
def delete_token(token_id: str):
    c = _console()
    c.tokens.delete_token(c.sessions.get(), token_id)
    return jsonify({"success": True})


@bp.post("/tokens/estimate-fee")
def estimate_fee():
    c = _console()
    parse_body(DeployTokenRequest, _body())
    return jsonify(fee_to_dict(c.tokens.estimate_deploy_fee(c.sessions.get())))


@bp.post("/tokens/deploy")
def deploy_token():
    c = _console()
    session = c.sessions.get()
    session.require_signer()
    req = parse_body(DeployTokenRequest, _body())
    token, tx_hash = c.tokens.deploy(
        session,
        DeployParams(name=req.name, symbol=req.symbol, decimals=req.decimals, initial_supply=req.initialSupply),
    )
    return jsonify({"token": token_to_dict(token), "txHash": tx_hash})


@bp.post("/tokens/save-external-deployment")
@bp.post("/tokens/save-tronlink-deployment")
def save_external_deployment():
    c = _console()
    session = c.sessions.get()
    session.require_wallet()
    req = parse_body(ExternalDeploymentRequest, _body())
    token, tx_hash = c.tokens.record_external_deployment(
        session,
        ExternalDeployment(
            tx_hash=req.txHash,
            contract_address=req.contractAddress,
            name=req.name,
            symbol=req.symbol,
            decimals=req.decimals,
            total_supply=req.totalSupply,
        ),
    )
    return jsonify({"token": token_to_dict(token), "txHash": tx_hash})


@bp.post("/tokens/transfer")
def transfer_token():
    c = _console()
    session = c.sessions.get()
    session.require_signer()
    req = parse_body(TransferTokenRequest, _body())
    tx_hash = c.tokens.transfer(session, req.tokenAddress, req.toAddress, req.amount)
    return jsonify({"txHash": tx_hash})


@bp.post("/tokens/mint")
def mint_token():
    c = _console()
    session = c.sessions.get()
    session.require_signer()
    req = parse_body(MintTokenRequest, _body())
    return jsonify({"txHash": c.tokens.mint(session, req.tokenAddress, req.amount)})


@bp.post("/tokens/burn")
def burn_token():
    c = _console()
    session = c.sessions.get()
    session.require_signer()
    req = parse_body(BurnTokenRequest, _body())
    return jsonify({"txHash": c.tokens.burn(session, req.tokenAddress, req.amount)})


# ---------- transactions ----------

@bp.get("/transactions")
@bp.get(f"/transactions/{NETWORK_SEGMENT}")
def list_transactions(network=None):
    c = _console()
    raw = request.args.get("limit")
    if raw is None:
        limit = c.default_tx_limit
    elif raw.isdigit() and int(raw) > 0:
        limit = int(raw)
    else:
        raise ValidationError("Invalid parameters", [{"field": "limit", "message": "Must be a positive integer"}])
    return jsonify([transaction_to_dict(t) for t in c.tokens.list_transactions(c.sessions.get(), limit)])


@bp.get("/transactions/<tx_id>/refresh")
def refresh_transaction(tx_id: str):
    c = _console()
    tx, receipt = c.tokens.refresh_transaction(c.sessions.get(), tx_id)
    return jsonify({"transaction": transaction_to_dict(tx), "receipt": receipt})
