import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from models.user import User
from models.wallet_transaction import BOOKING, DEPOSIT, REFUND, WalletTransaction
from models import db
from services import wallet
from services.errors import DuplicateTransaction, PersistenceError, UserNotFound, ValidationError


def test_debit_and_credit_apply_sign_internally(make_user):
    user = make_user()
    wallet.credit(user.id, 500, DEPOSIT, "top up", reference="pay_1")
    wallet.debit(user.id, 300, BOOKING, "Booking at Iron Temple Gym", reference="bk-1")

    amounts = sorted(t.amount for t in WalletTransaction.query.filter_by(user_id=user.id))
    assert amounts == [-300, 500]
    assert wallet.get_balance(user.id) == 200
    assert wallet.compute_balance(user.id) == 200


@pytest.mark.parametrize("amount", [0, -5, 2.5, True, "100"])
def test_amount_must_be_positive_integer(make_user, amount):
    user = make_user()
    with pytest.raises(ValidationError):
        wallet.credit(user.id, amount, DEPOSIT, "bad")


def test_unknown_user(app):
    with pytest.raises(UserNotFound):
        wallet.credit(999, 100, DEPOSIT, "top up")
    with pytest.raises(UserNotFound):
        wallet.get_balance(999)


def test_same_reference_twice_is_rejected(make_user):
    user = make_user(balance=1000)
    wallet.credit(user.id, 100, REFUND, "Refund", reference="bk-1")
    with pytest.raises(DuplicateTransaction):
        wallet.credit(user.id, 100, REFUND, "Refund", reference="bk-1")
    assert wallet.get_balance(user.id) == 1100


def test_same_reference_different_type_is_allowed(make_user):
    user = make_user(balance=1000)
    wallet.debit(user.id, 100, BOOKING, "Booking", reference="bk-1")
    wallet.credit(user.id, 100, REFUND, "Refund", reference="bk-1")
    assert wallet.get_balance(user.id) == 1000


def test_record_deposit_is_idempotent_per_reference(make_user):
    user = make_user()
    first = wallet.record_deposit(user.id, 250, "pay_abc")
    again = wallet.record_deposit(user.id, 250, "pay_abc")

    assert again.id == first.id
    assert wallet.get_balance(user.id) == 250
    assert "pay_abc" in first.description


def test_record_deposit_requires_reference(make_user):
    user = make_user()
    with pytest.raises(ValidationError):
        wallet.record_deposit(user.id, 100, "")


def test_transactions_newest_first_with_limit(make_user):
    user = make_user()
    for i in range(1, 4):
        wallet.credit(user.id, i * 10, DEPOSIT, f"top up {i}", reference=f"pay_{i}")

    rows = wallet.transactions(user.id, limit=2)
    assert [r.amount for r in rows] == [30, 20]


def test_reconcile_repairs_drifted_cache(make_user):
    user = make_user(balance=400)
    User.query.filter_by(id=user.id).update({User.wallet_balance: 9999})
    db.session.commit()

    previous, new = wallet.reconcile(user.id)

    assert (previous, new) == (9999, 400)
    assert wallet.get_balance(user.id) == 400


def test_reconcile_noop_when_consistent(make_user):
    user = make_user(balance=400)
    assert wallet.reconcile(user.id) == (400, 400)


@pytest.fixture
def locked_users_table(app):
    engine = db.engine

    def _locked(conn, cursor, statement, parameters, context, executemany):
        if statement.lstrip().upper().startswith("UPDATE USERS"):
            raise OperationalError(statement, parameters, Exception("database is locked"))

    event.listen(engine, "before_cursor_execute", _locked)
    yield
    event.remove(engine, "before_cursor_execute", _locked)


@pytest.mark.parametrize("move", [
    lambda user_id: wallet.credit(user_id, 10, DEPOSIT, "top up", reference="x"),
    lambda user_id: wallet.debit(user_id, 10, BOOKING, "Booking", reference="bk-9"),
    lambda user_id: wallet.record_deposit(user_id, 10, "pay_locked"),
])
def test_lock_timeout_on_balance_update_is_persistence_error(make_user, locked_users_table, move):
    user = make_user()
    with pytest.raises(PersistenceError):
        move(user.id)
    assert WalletTransaction.query.filter_by(user_id=user.id).count() == 0
