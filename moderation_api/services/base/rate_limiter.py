from abc import ABC, abstractmethod
from moderation_api.schemas.moderation import RateLimitResult


class BaseRateLimiter(ABC):
    @abstractmethod
    async def limit(self, key: str) -> RateLimitResult:
        """Record one request for ``key`` and report whether it may proceed."""
        pass

    async def close(self) -> None:
        pass
