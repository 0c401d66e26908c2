from .cookies import cookie_header, parse_cookie_header
from .logging import setup_logging
from .urls import normalize_broker_url, private_channel, realtime_endpoint
from .validation import validate_session_id

__all__ = [
    "cookie_header",
    "parse_cookie_header",
    "setup_logging",
    "normalize_broker_url",
    "private_channel",
    "realtime_endpoint",
    "validate_session_id",
]
