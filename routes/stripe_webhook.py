import json
import logging

import stripe
from flask import Blueprint, current_app, request, jsonify

from services import wallet
from services.errors import BookingError
from utils.audit import log_event

logger = logging.getLogger(__name__)

webhook_bp = Blueprint("webhook", __name__, url_prefix="/webhooks")

WALLET_RECHARGE = "wallet_recharge"


@webhook_bp.post("/stripe")
def stripe_webhook():
    endpoint_secret = current_app.config.get("STRIPE_WEBHOOK_SECRET")
    sig_header = request.headers.get("Stripe-Signature")
    payload = request.data

    if not endpoint_secret:
        return jsonify(error="Webhook secret not configured"), 500
    if not sig_header:
        return jsonify(error="Invalid webhook signature"), 400

    try:
        stripe.WebhookSignature.verify_header(
            payload.decode("utf-8"), sig_header, endpoint_secret,
            tolerance=stripe.Webhook.DEFAULT_TOLERANCE,
        )
        event = json.loads(payload)
    except (ValueError, stripe.SignatureVerificationError):
        return jsonify(error="Invalid webhook signature"), 400

    if event["type"] != "checkout.session.completed":
        return jsonify(received=True), 200

    session = event["data"]["object"]
    meta = session.get("metadata") or {}
    if meta.get("purpose") != WALLET_RECHARGE:
        return jsonify(received=True), 200

    session_id = session.get("id")
    reference = session.get("payment_intent") or session_id
    amount_minor = session.get("amount_total") or 0
    try:
        user_id = int(meta.get("user_id"))
    except (TypeError, ValueError):
        logger.warning("Recharge session %s has no usable user_id", session_id)
        return jsonify(error="user_id missing from metadata"), 400

    # wallet is kept in whole currency units; Stripe reports the smallest unit
    amount, remainder = divmod(int(amount_minor), 100)
    if remainder or amount <= 0:
        # acknowledged so Stripe stops redelivering; needs a manual credit
        logger.error("Recharge %s for user %s has amount_total %s, not a positive whole unit; not credited",
                     reference, user_id, amount_minor)
        log_event("WALLET_DEPOSIT_REJECTED", user_id=user_id, entity="stripe_session", entity_id=session_id,
                  metadata={"reference": reference, "amount_total": amount_minor})
        return jsonify(received=True, credited=False), 200

    try:
        entry = wallet.record_deposit(user_id, amount, reference)
    except BookingError as exc:
        logger.warning("Recharge %s for user %s rejected: %s", reference, user_id, exc.message)
        return jsonify(exc.to_dict()), exc.status_code

    log_event("WALLET_DEPOSIT", user_id=user_id, entity="wallet_transaction", entity_id=entry.id,
              metadata={"stripe_session_id": session_id, "reference": reference, "amount": amount})
    return jsonify(received=True), 200
