import asyncio
from collections import defaultdict
from contextlib import asynccontextmanager


class VetBookingLocks:
    """Per-veterinarian locks serializing conflict-check-then-write.

    Only guards bookings handled by this process; separate workers can still
    race each other.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        # One lock per vet, never pruned; bounded by the number of veterinarians
        self._locks: defaultdict[int, asyncio.Lock] = defaultdict(asyncio.Lock)

    @asynccontextmanager
    async def hold(self, vet_id: int | None):
        if not self.enabled or vet_id is None:
            yield
            return

        async with self._locks[vet_id]:
            yield
