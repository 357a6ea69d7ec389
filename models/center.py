from datetime import datetime
from models.db import db

class Center(db.Model):
    __tablename__ = "centers"

    id = db.Column(db.String(64), primary_key=True)  # e.g. CTR-2023-0001
    name = db.Column(db.String(120), nullable=False)
    address = db.Column(db.String(255), nullable=True)
    latitude = db.Column(db.Float, nullable=True)
    longitude = db.Column(db.Float, nullable=True)

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
