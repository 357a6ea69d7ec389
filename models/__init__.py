from .db import db
from .user import User
from .audit_log import AuditLog
from .center import Center
from .booking import Booking
from .wallet_transaction import WalletTransaction
