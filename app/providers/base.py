from abc import ABC, abstractmethod


class IdentityProviderBase(ABC):
    @abstractmethod
    async def verify(self, identity_id: str) -> bool:
        """Return True if the identity exists on the external platform."""
        pass
