import asyncio
import logging

from .base import IdentityProviderBase

logger = logging.getLogger(__name__)


class SimulatedIdentityProvider(IdentityProviderBase):
    """Stand-in for a Discord user lookup.

    Waits delay_seconds to mimic the API round trip and reports every id as
    existing unless force_missing is set.
    """

    def __init__(self, delay_seconds: float = 0.5, force_missing: bool = False):
        self.delay_seconds = delay_seconds
        self.force_missing = force_missing

    async def verify(self, identity_id: str) -> bool:
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)

        exists = not self.force_missing
        logger.info(f"Simulated identity check: identity_id={identity_id}, exists={exists}")
        return exists
