from dataclasses import dataclass
from typing import Optional
import os
from dotenv import load_dotenv

from src.constants import (
    DEFAULT_APP_REFERER,
    DEFAULT_APP_TITLE,
    DEFAULT_CAPTION_API_BASE,
    DEFAULT_CAPTION_MODEL,
    DEFAULT_CREDENTIALS_PATH,
    DEFAULT_INSIGHT_API_BASE,
    DEFAULT_INSIGHT_MODEL,
    DEFAULT_SAMPLES_BASE_URL,
)


@dataclass(frozen=True)
class Config:
    telegram_bot_token: str
    allowed_chat_id: str
    log_level: str
    credentials_path: str
    samples_base_url: str
    caption_api_base: str
    insight_api_base: str
    caption_model: str
    insight_model: str
    caption_api_key: Optional[str]
    insight_api_key: Optional[str]
    app_referer: str
    app_title: str
    request_timeout: Optional[float]

    @classmethod
    def from_env(cls) -> "Config":
        load_dotenv()

        token = os.getenv("TELEGRAM_BOT_TOKEN")
        chat_id = os.getenv("ALLOWED_CHAT_ID")
        log_level = os.getenv("LOG_LEVEL", "INFO")
        credentials_path = os.getenv("CREDENTIALS_PATH") or DEFAULT_CREDENTIALS_PATH
        samples_base_url = os.getenv("SAMPLES_BASE_URL") or DEFAULT_SAMPLES_BASE_URL
        caption_api_base = os.getenv("CAPTION_API_BASE") or DEFAULT_CAPTION_API_BASE
        insight_api_base = os.getenv("INSIGHT_API_BASE") or DEFAULT_INSIGHT_API_BASE
        caption_model = os.getenv("CAPTION_MODEL") or DEFAULT_CAPTION_MODEL
        insight_model = os.getenv("INSIGHT_MODEL") or DEFAULT_INSIGHT_MODEL
        caption_api_key = os.getenv("HF_TOKEN") or None
        insight_api_key = os.getenv("OPENROUTER_API_KEY") or None
        app_referer = os.getenv("APP_REFERER") or DEFAULT_APP_REFERER
        app_title = os.getenv("APP_TITLE") or DEFAULT_APP_TITLE
        raw_timeout = os.getenv("REQUEST_TIMEOUT", "").strip()

        return cls._validate(
            telegram_bot_token=token,
            allowed_chat_id=chat_id,
            log_level=log_level,
            credentials_path=credentials_path,
            samples_base_url=samples_base_url.rstrip("/"),
            caption_api_base=caption_api_base.rstrip("/"),
            insight_api_base=insight_api_base.rstrip("/"),
            caption_model=caption_model,
            insight_model=insight_model,
            caption_api_key=caption_api_key,
            insight_api_key=insight_api_key,
            app_referer=app_referer,
            app_title=app_title,
            request_timeout=float(raw_timeout) if raw_timeout else None,
        )

    @staticmethod
    def _validate(
        telegram_bot_token: Optional[str],
        allowed_chat_id: Optional[str],
        log_level: str,
        credentials_path: str,
        samples_base_url: str,
        caption_api_base: str,
        insight_api_base: str,
        caption_model: str,
        insight_model: str,
        caption_api_key: Optional[str],
        insight_api_key: Optional[str],
        app_referer: str,
        app_title: str,
        request_timeout: Optional[float],
    ) -> "Config":
        match telegram_bot_token:
            case None | "":
                raise ValueError("TELEGRAM_BOT_TOKEN must be set in .env")
            case _:
                pass

        match allowed_chat_id:
            case None | "":
                raise ValueError("ALLOWED_CHAT_ID must be set in .env")
            case _:
                pass

        match request_timeout:
            case float() as t if t <= 0:
                raise ValueError("REQUEST_TIMEOUT must be a positive number of seconds")
            case _:
                pass

        return Config(
            telegram_bot_token=telegram_bot_token,
            allowed_chat_id=allowed_chat_id,
            log_level=log_level,
            credentials_path=credentials_path,
            samples_base_url=samples_base_url,
            caption_api_base=caption_api_base,
            insight_api_base=insight_api_base,
            caption_model=caption_model,
            insight_model=insight_model,
            caption_api_key=caption_api_key,
            insight_api_key=insight_api_key,
            app_referer=app_referer,
            app_title=app_title,
            request_timeout=request_timeout,
        )
