"""OpenRouterInsightClient — OpenRouter chat completions via the OpenAI SDK."""
from typing import Optional

from openai import APIConnectionError, APIStatusError, AsyncOpenAI

from src.constants import (
    DEFAULT_APP_REFERER,
    DEFAULT_APP_TITLE,
    DEFAULT_INSIGHT_API_BASE,
    INSIGHT_MAX_TOKENS,
    INSIGHT_SYSTEM_PROMPT,
    INSIGHT_TEMPERATURE,
    INSIGHT_USER_TEMPLATE,
    SERVICE_INSIGHT,
)
from src.errors import AuthOrTransportError, EmptyResponseError
from src.insight.client import InsightClient


def build_messages(user_prompt: str, caption: str) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": INSIGHT_SYSTEM_PROMPT},
        {"role": "user", "content": INSIGHT_USER_TEMPLATE % (user_prompt, caption)},
    ]


class OpenRouterInsightClient(InsightClient):

    def __init__(
        self,
        api_base: str = DEFAULT_INSIGHT_API_BASE,
        referer: str = DEFAULT_APP_REFERER,
        title: str = DEFAULT_APP_TITLE,
        timeout: Optional[float] = None,
    ) -> None:
        self._api_base = api_base
        self._headers = {"HTTP-Referer": referer, "X-Title": title}
        self._timeout = timeout

    async def insight(self, api_key: str, model: str, user_prompt: str, caption: str) -> str:
        # max_retries=0: exactly one attempt per call
        client = AsyncOpenAI(
            api_key=api_key,
            base_url=self._api_base,
            default_headers=self._headers,
            max_retries=0,
            timeout=self._timeout,
        )
        try:
            response = await client.chat.completions.create(
                model=model,
                messages=build_messages(user_prompt, caption),
                temperature=INSIGHT_TEMPERATURE,
                max_tokens=INSIGHT_MAX_TOKENS,
            )
        except APIStatusError as exc:
            raise AuthOrTransportError(SERVICE_INSIGHT, exc.status_code, exc.response.text) from exc
        except APIConnectionError as exc:
            raise AuthOrTransportError(SERVICE_INSIGHT, None, str(exc)) from exc

        match response.choices:
            case [first, *_] if first.message is not None and first.message.content:
                content = first.message.content.strip()
            case _:
                content = ""

        match content:
            case "":
                raise EmptyResponseError(SERVICE_INSIGHT)
            case text:
                return text
