"""InsightClient — abstract base for caption-to-insight chat backends."""
from abc import ABC, abstractmethod


class InsightClient(ABC):
    @abstractmethod
    async def insight(self, api_key: str, model: str, user_prompt: str, caption: str) -> str:
        """Turn a caption plus the user's prompt into an insight. Raises CaptionerError on failure."""
        ...
