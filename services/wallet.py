"""
Wallet ledger.

The ledger is append-only: every debit or credit inserts one signed
WalletTransaction row. ``users.wallet_balance`` caches the sum and is moved by
an atomic ``wallet_balance + delta`` update flushed together with the insert,
so the two never drift as long as they share a transaction.
"""

import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import db
from models.user import User
from models.wallet_transaction import WalletTransaction, DEPOSIT, TRANSACTION_TYPES
from services.directory import get_profile
from services.errors import DuplicateTransaction, PersistenceError, ValidationError

logger = logging.getLogger(__name__)


def _check_amount(amount):
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValidationError("Amount must be a positive whole number")


def _append(user_id, signed_amount, tx_type, description, reference, commit):
    if tx_type not in TRANSACTION_TYPES:
        raise ValidationError(f"Unknown transaction type: {tx_type}")
    get_profile(user_id)

    try:
        if reference and WalletTransaction.query.filter_by(type=tx_type, reference=reference).first():
            raise DuplicateTransaction(details={"type": tx_type, "reference": reference})

        entry = WalletTransaction(
            user_id=user_id,
            amount=signed_amount,
            type=tx_type,
            description=description or "",
            reference=reference,
        )
        db.session.add(entry)
        User.query.filter_by(id=user_id).update(
            {User.wallet_balance: User.wallet_balance + signed_amount},
            synchronize_session=False,
        )
        if commit:
            db.session.commit()
        else:
            db.session.flush()
    except IntegrityError as exc:
        db.session.rollback()
        raise DuplicateTransaction(details={"type": tx_type, "reference": reference}) from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Wallet %s of %s for user %s failed", tx_type, signed_amount, user_id)
        raise PersistenceError() from exc

    return entry


def debit(user_id, amount, tx_type, description, reference=None, commit=True) -> WalletTransaction:
    """Append ``-amount``. ``amount`` is always a positive magnitude."""
    _check_amount(amount)
    return _append(user_id, -amount, tx_type, description, reference, commit)


def credit(user_id, amount, tx_type, description, reference=None, commit=True) -> WalletTransaction:
    """Append ``+amount``."""
    _check_amount(amount)
    return _append(user_id, amount, tx_type, description, reference, commit)


def get_balance(user_id) -> int:
    get_profile(user_id)
    balance = db.session.query(User.wallet_balance).filter(User.id == user_id).scalar()
    return balance or 0


def compute_balance(user_id) -> int:
    total = (
        db.session.query(func.coalesce(func.sum(WalletTransaction.amount), 0))
        .filter(WalletTransaction.user_id == user_id)
        .scalar()
    )
    return int(total)


def reconcile(user_id):
    """Rewrite the cached balance from the ledger. Returns (previous, new)."""
    previous = get_balance(user_id)
    calculated = compute_balance(user_id)
    if calculated == previous:
        return previous, previous

    try:
        User.query.filter_by(id=user_id).update(
            {User.wallet_balance: calculated}, synchronize_session=False
        )
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise PersistenceError() from exc

    logger.warning("Wallet for user %s repaired: %s -> %s", user_id, previous, calculated)
    return previous, calculated


def transactions(user_id, limit=50):
    get_profile(user_id)
    return (
        WalletTransaction.query
        .filter_by(user_id=user_id)
        .order_by(WalletTransaction.created_at.desc(), WalletTransaction.id.desc())
        .limit(limit)
        .all()
    )


def record_deposit(user_id, amount, payment_reference) -> WalletTransaction:
    """
    Credit a successful gateway payment. Replaying the same reference returns
    the entry already recorded instead of crediting twice.
    """
    if not payment_reference:
        raise ValidationError("payment reference required")

    existing = WalletTransaction.query.filter_by(type=DEPOSIT, reference=payment_reference).first()
    if existing:
        logger.info("Deposit %s already recorded", payment_reference)
        return existing

    return credit(
        user_id,
        amount,
        DEPOSIT,
        f"Wallet recharge (payment {payment_reference})",
        reference=payment_reference,
    )


def transaction_to_dict(tx: WalletTransaction) -> dict:
    return {
        "id": tx.id,
        "amount": tx.amount,
        "type": tx.type,
        "description": tx.description,
        "reference": tx.reference,
        "created_at": tx.created_at.isoformat() if tx.created_at else None,
    }
