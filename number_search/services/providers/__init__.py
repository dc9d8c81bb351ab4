# Vendor API clients
from .base import ProviderError
from .forager import ForagerClient
from .aviato import AviatoClient

__all__ = [
    "ProviderError",
    "ForagerClient",
    "AviatoClient",
]
