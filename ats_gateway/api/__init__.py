"""HTTP surface of the gateway."""

from ats_gateway.api.app import create_app
from ats_gateway.api.errors import ApiError

__all__ = ["create_app", "ApiError"]
