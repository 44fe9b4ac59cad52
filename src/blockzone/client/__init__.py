"""Client side of the worker: HTTP API, online sessions, player identity."""

from .api import ApiClientError, BlockZoneClient, PaymentRequiredError
from .identity import IdentityService, device_fingerprint, generate_player_name
from .session import OnlineSession, SessionTicket

__all__ = [
    "ApiClientError",
    "BlockZoneClient",
    "PaymentRequiredError",
    "IdentityService",
    "device_fingerprint",
    "generate_player_name",
    "OnlineSession",
    "SessionTicket",
]
