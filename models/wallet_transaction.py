from datetime import datetime
from models.db import db

DEPOSIT = "deposit"
BOOKING = "booking"
REFUND = "refund"

TRANSACTION_TYPES = (DEPOSIT, BOOKING, REFUND)

class WalletTransaction(db.Model):
    __tablename__ = "wallet_transactions"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    amount = db.Column(db.Integer, nullable=False)  # signed: negative = debit
    type = db.Column(db.String(20), nullable=False)
    description = db.Column(db.String(255), nullable=False, default="")

    # booking code for booking/refund entries, gateway payment reference for deposits
    reference = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        # one debit and at most one refund per booking, one deposit per payment
        db.UniqueConstraint("type", "reference", name="uq_wallet_tx_type_reference"),
    )
