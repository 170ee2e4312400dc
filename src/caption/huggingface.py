"""HuggingFaceCaptionClient — Hugging Face inference API captioning backend."""
import logging
from typing import Optional
from urllib.parse import quote

import httpx

from src.caption.client import CaptionClient
from src.constants import (
    CAPTION_FORM_FIELD,
    DEFAULT_CAPTION_API_BASE,
    DEFAULT_IMAGE_NAME,
    SERVICE_CAPTION,
)
from src.errors import AuthOrTransportError, RemoteError, UnexpectedResponseError

logger = logging.getLogger(__name__)


class HuggingFaceCaptionClient(CaptionClient):

    def __init__(
        self,
        api_base: str = DEFAULT_CAPTION_API_BASE,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_base = api_base
        self._timeout = timeout
        self._transport = transport

    def endpoint(self, model: str) -> str:
        return f"{self._api_base}/models/{quote(model, safe='')}"

    async def caption(self, api_key: str, model: str, image_bytes: bytes, file_name: str) -> str:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    self.endpoint(model),
                    headers={"Authorization": f"Bearer {api_key}"},
                    files={CAPTION_FORM_FIELD: (file_name or DEFAULT_IMAGE_NAME, image_bytes)},
                )
            except httpx.HTTPError as exc:
                raise AuthOrTransportError(SERVICE_CAPTION, None, str(exc) or type(exc).__name__) from exc

        match response.is_success:
            case False:
                raise AuthOrTransportError(SERVICE_CAPTION, response.status_code, response.text)
            case True:
                pass

        try:
            data = response.json()
        except ValueError as exc:
            logger.debug("Caption response is not JSON: %s", response.text[:200])
            raise UnexpectedResponseError(SERVICE_CAPTION) from exc

        match data:
            case [{"generated_text": str() as text}, *_] if text:
                return text
            case {"error": error} if error:
                raise RemoteError(SERVICE_CAPTION, str(error))
            case _:
                raise UnexpectedResponseError(SERVICE_CAPTION)
