from abc import ABC, abstractmethod
from typing import Any


class BaseModerationModel(ABC):
    @abstractmethod
    async def generate_content(
        self,
        *,
        model: str,
        contents: list,
        system_instruction: str,
        response_mime_type: str,
    ) -> Any:
        """Single request/response call; the result exposes
        ``candidates[0].content.parts[0].text``."""
        pass

    async def close(self) -> None:
        pass
