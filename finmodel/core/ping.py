"""Ping utility used by the API health-check."""

from finmodel import __version__
from finmodel.schemas.ping import PingResponse


def get_ping() -> PingResponse:
    """Return the static ping message with the engine version."""
    return PingResponse(message="pong", version=__version__)
