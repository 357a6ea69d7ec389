import logging

import click
from flask import Flask, jsonify
from config import Config
from routes import health_bp, booking_bp, checkin_bp, wallet_bp, center_bp, webhook_bp

from models import db
from flask_migrate import Migrate
from services import qr, wallet
from services.errors import BookingError, PersistenceError
from utils.auth_context import load_current_user

logger = logging.getLogger(__name__)


def create_app(config_overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(booking_bp)
    app.register_blueprint(checkin_bp)
    app.register_blueprint(wallet_bp)
    app.register_blueprint(center_bp)
    app.register_blueprint(webhook_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    # camera-decoded payloads or manual center pick, fixed for the app's lifetime
    app.extensions["qr_scanner"] = qr.make_scanner(app.config.get("QR_SCANNER", "payload"))

    @app.before_request
    def _load_user():
        load_current_user()

    @app.errorhandler(BookingError)
    def _booking_error(exc):
        if isinstance(exc, PersistenceError):
            logger.error("Persistence failure: %s", exc.__cause__ or exc)
        else:
            logger.info("%s: %s", exc.code, exc.message)
        return jsonify(exc.to_dict()), exc.status_code

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    return app

#-------------------------

def register_cli(app):
    @app.cli.command("reconcile-wallet")
    @click.argument("user_id", type=int)
    def reconcile_wallet(user_id):
        """Recompute a user's cached wallet balance from the ledger."""
        try:
            previous, new = wallet.reconcile(user_id)
        except BookingError as exc:
            raise click.ClickException(exc.message)

        if previous == new:
            click.echo(f"Wallet for user {user_id} already correct: {new}")
        else:
            click.echo(f"Wallet for user {user_id} repaired: {previous} -> {new}")

    @app.cli.command("center-qr")
    @click.argument("center_id")
    def center_qr(center_id):
        """Print the check-in QR payload for a center."""
        try:
            click.echo(qr.generate(center_id.strip()))
        except ValueError as exc:
            raise click.ClickException(str(exc))

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
