from models import db
from models.user import User


def test_reconcile_wallet_repairs_balance(app, make_user):
    user = make_user(balance=250)
    User.query.filter_by(id=user.id).update({User.wallet_balance: 0})
    db.session.commit()

    result = app.test_cli_runner().invoke(args=["reconcile-wallet", str(user.id)])

    assert result.exit_code == 0
    assert "repaired: 0 -> 250" in result.output


def test_reconcile_wallet_unknown_user(app):
    result = app.test_cli_runner().invoke(args=["reconcile-wallet", "999"])
    assert result.exit_code != 0
    assert "User not found" in result.output


def test_center_qr(app):
    result = app.test_cli_runner().invoke(args=["center-qr", "CTR-2023-0001"])
    assert result.exit_code == 0
    assert result.output.strip() == "paygo-center:CTR-2023-0001"
