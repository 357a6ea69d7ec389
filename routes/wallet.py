from flask import Blueprint, current_app, request, jsonify, g

from services import wallet
from utils.auth_context import login_required

wallet_bp = Blueprint("wallet", __name__, url_prefix="/wallet")


@wallet_bp.get("")
@login_required
def balance():
    return jsonify(user_id=g.user.id, balance=wallet.get_balance(g.user.id)), 200


@wallet_bp.get("/transactions")
@login_required
def transactions():
    default_limit = current_app.config.get("WALLET_TRANSACTIONS_LIMIT", 50)
    limit = request.args.get("limit", default_limit, type=int)
    limit = max(1, min(limit, 200))
    rows = wallet.transactions(g.user.id, limit=limit)
    return jsonify([wallet.transaction_to_dict(t) for t in rows]), 200
