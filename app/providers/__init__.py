from .base import IdentityProviderBase
from .simulated import SimulatedIdentityProvider

__all__ = [
    "IdentityProviderBase",
    "SimulatedIdentityProvider",
]
