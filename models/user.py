from datetime import datetime
from models.db import db

class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)

    # identity issued by the auth provider; never used as a foreign key
    auth_uid = db.Column(db.String(128), unique=True, nullable=False, index=True)

    display_name = db.Column(db.String(120), nullable=True)
    phone_number = db.Column(db.String(30), nullable=True)
    email = db.Column(db.String(255), nullable=True)

    # running total of wallet_transactions.amount, updated in the same transaction as each entry
    wallet_balance = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
