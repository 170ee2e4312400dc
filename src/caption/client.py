"""CaptionClient — abstract base for image captioning backends."""
from abc import ABC, abstractmethod


class CaptionClient(ABC):
    @abstractmethod
    async def caption(self, api_key: str, model: str, image_bytes: bytes, file_name: str) -> str:
        """Describe the image in one short sentence. Raises CaptionerError on failure."""
        ...
