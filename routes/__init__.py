from .health import health_bp
from .booking import booking_bp
from .checkin import checkin_bp
from .wallet import wallet_bp
from .centers import center_bp
from .stripe_webhook import webhook_bp
