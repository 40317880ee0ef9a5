"""
HTTP API for one token instance.

Mutating routes without a `signed` envelope act as the node wallet, which is
the token owner: expose this server only to trusted clients.
"""
import os
import threading

from flask import Flask, jsonify, request

from taxtoken.config import (
    API_PORT,
    TOKEN_NAME,
    TOKEN_SYMBOL,
    INITIAL_SUPPLY,
    BASE,
    EVENTS_PAGE_LIMIT,
    EVENTS_PAGE_MAX,
)
from taxtoken.errors import BadRequest, TokenError, Unauthorized
from taxtoken.tax.taxed_token import TaxedToken
from taxtoken.util.log import log_info, log_success, log_warn
from taxtoken.wallet.wallet import Wallet, normalize_address

app = Flask(__name__)

PORT = int(os.environ.get('API_PORT', API_PORT))
owner_private_key = os.environ.get('OWNER_PRIVATE_KEY')
wallet = Wallet.from_private_key(owner_private_key) if owner_private_key else Wallet()
token = TaxedToken(
    wallet.address,
    name=os.environ.get('TOKEN_NAME', TOKEN_NAME),
    symbol=os.environ.get('TOKEN_SYMBOL', TOKEN_SYMBOL),
    initial_supply=int(os.environ.get('INITIAL_SUPPLY', INITIAL_SUPPLY)),
)
# every state-changing call runs to completion before the next starts
token_lock = threading.Lock()
# (caller, nonce) of every signed call already accepted
used_calls = set()

log_info(f"[HTTP] API port={PORT}")
log_success(f"[TOKEN] {token.symbol} deployed | owner={wallet.address[:10]}... | supply={token.total_supply}")


def _error(exc, status=400):
    if isinstance(exc, Unauthorized):
        status = 403
    return jsonify({"error": str(exc)}), status


def _resolve_call(action: str):
    """
    Return (caller, params) for a mutating route. Call with token_lock held.
    A body carrying a `signed` envelope acts for the envelope's signer, and
    each envelope is accepted once; any other body acts for the node wallet.
    """
    body = request.get_json(silent=True)
    if body is None:
        body = {}
    if not isinstance(body, dict):
        raise BadRequest("Request body must be a JSON object")

    envelope = body.get("signed")
    if not envelope:
        return wallet.address, body

    caller, params = Wallet.verify_call(envelope, action)
    if not isinstance(params, dict):
        raise BadRequest("Signed params must be a JSON object")

    nonce = envelope["payload"].get("nonce")
    if not nonce or not isinstance(nonce, str):
        raise BadRequest("Signed call is missing its nonce")
    call_id = (caller, nonce)
    if call_id in used_calls:
        raise Unauthorized("Signed call already used")
    used_calls.add(call_id)
    return caller, params


def _int_arg(name, default=None):
    raw = request.args.get(name)
    if raw is None:
        return default
    return int(raw)


@app.route("/token")
def route_token():
    info = token.to_json()
    info["base"] = BASE
    info["tax_rate"] = token.current_tax_rate()
    info["ledger"] = token.ledger.to_json()
    return jsonify(info)


@app.route("/token/tax_rate")
def route_token_tax_rate():
    try:
        now = _int_arg("now")
        rate = token.current_tax_rate(now)
    except ValueError:
        return jsonify({"error": "now must be an integer"}), 400
    except TokenError as exc:
        return _error(exc)

    return jsonify({
        "tax_rate": rate,
        "base": BASE,
        "launched": rate is not None,
        "launch_timestamp": token.launch_timestamp,
    })


@app.route("/token/quote")
def route_token_quote():
    sender = request.args.get("sender") or wallet.address
    recipient = request.args.get("recipient")
    if not recipient:
        return jsonify({"error": "recipient is required"}), 400
    try:
        amount = _int_arg("amount", 0)
    except ValueError:
        return jsonify({"error": "invalid amount"}), 400

    try:
        receipt = token.quote(sender, recipient, amount)
    except TokenError as exc:
        return _error(exc)

    balance = token.balance_of(sender)
    response = receipt.to_json()
    response["balance"] = balance
    response["insufficient"] = amount > balance
    return jsonify(response)


@app.route("/balance")
def route_balance():
    address = request.args.get("address")
    if not address:
        return jsonify({"error": "address is required"}), 400
    try:
        balance = token.balance_of(address)
    except TokenError as exc:
        return _error(exc)
    return jsonify({"address": normalize_address(address), "balance": balance})


@app.route("/allowance")
def route_allowance():
    owner = request.args.get("owner")
    spender = request.args.get("spender")
    if not owner or not spender:
        return jsonify({"error": "owner and spender are required"}), 400
    return jsonify({
        "owner": normalize_address(owner),
        "spender": normalize_address(spender),
        "allowance": token.allowance(owner, spender),
    })


@app.route("/events")
def route_events():
    """
    Recent ledger events, newest first.
    Optional params:
    - address: only events sent from or to this address
    - limit: max events to return (default 50)
    """
    address = normalize_address((request.args.get("address") or "").strip()) or None
    try:
        limit = max(1, min(EVENTS_PAGE_MAX, _int_arg("limit", EVENTS_PAGE_LIMIT)))
    except (TypeError, ValueError):
        limit = EVENTS_PAGE_LIMIT

    return jsonify({
        "events": token.ledger.events_for(address, limit=limit),
        "total_supply": token.total_supply,
    })


@app.route("/pool/register", methods=["POST"])
def route_pool_register():
    try:
        with token_lock:
            caller, params = _resolve_call("register_pool")
            token.register_pool(params.get("address"), caller)
    except TokenError as exc:
        log_warn(f"[POOL] Registration rejected: {exc}")
        return _error(exc)

    return jsonify({
        "pool_address": token.pool_address,
        "launch_timestamp": token.launch_timestamp,
    })


@app.route("/transfer", methods=["POST"])
def route_transfer():
    try:
        with token_lock:
            caller, params = _resolve_call("transfer")
            receipt = token.transfer(caller, params.get("recipient"), params.get("amount"))
    except TokenError as exc:
        log_warn(f"[TX] Transfer rejected: {exc}")
        return _error(exc)

    log_info(
        f"[TX] {receipt.sender[:10]}... -> {receipt.recipient[:10]}... "
        f"amount={receipt.amount} tax={receipt.tax_amount} rate={receipt.tax_rate}"
    )
    return jsonify(receipt.to_json())


@app.route("/transfer_from", methods=["POST"])
def route_transfer_from():
    try:
        with token_lock:
            caller, params = _resolve_call("transfer_from")
            receipt = token.transfer_from(
                caller,
                params.get("sender"),
                params.get("recipient"),
                params.get("amount"),
            )
    except TokenError as exc:
        log_warn(f"[TX] TransferFrom rejected: {exc}")
        return _error(exc)

    log_info(f"[TX] {caller[:10]}... moved {receipt.amount} for {receipt.sender[:10]}... tax={receipt.tax_amount}")
    return jsonify(receipt.to_json())


@app.route("/approve", methods=["POST"])
def route_approve():
    try:
        with token_lock:
            caller, params = _resolve_call("approve")
            token.approve(caller, params.get("spender"), params.get("amount"))
    except TokenError as exc:
        log_warn(f"[TX] Approval rejected: {exc}")
        return _error(exc)

    spender = normalize_address(params.get("spender"))
    return jsonify({
        "owner": caller,
        "spender": spender,
        "allowance": token.allowance(caller, spender),
    })


@app.route("/wallet/info")
def route_wallet_info():
    log_info(f"[WALLET] Info requested addr={wallet.address[:10]}...")
    return jsonify({
        "address": wallet.address,
        "balance": token.balance_of(wallet.address),
        "public_key": wallet.public_key,
        "is_owner": token.owner_gate.is_owner(wallet.address),
    })


@app.route("/wallet/create", methods=["POST"])
def route_wallet_create():
    """
    Create a standalone account and return its keys. Nothing is stored server side.
    """
    new_wallet = Wallet()
    log_info(f"[WALLET] Created standalone wallet {new_wallet.address[:10]}...")
    return jsonify({
        "address": new_wallet.address,
        "public_key": new_wallet.public_key,
        "private_key": new_wallet.private_key_hex(),
    })


if __name__ == '__main__':
    app.run(port=PORT)
