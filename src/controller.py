"""CaptionerController — transport-agnostic command layer over the pipeline."""
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional

from src.caption.client import CaptionClient
from src.caption.huggingface import HuggingFaceCaptionClient
from src.config import Config
from src.constants import (
    DEFAULT_PROMPT,
    MSG_CLEARED,
    MSG_IMAGE_SELECTED,
    MSG_KEY_MISSING,
    MSG_KEY_SET,
    MSG_NO_IMAGE,
    MSG_SAMPLE_FAILED,
    MSG_SAMPLE_LINE,
    MSG_SAMPLE_LOADING,
    MSG_SAMPLE_MISSING_MARK,
    MSG_SAMPLE_READY,
    MSG_SAMPLE_RECHECK,
    MSG_SAMPLE_UNKNOWN,
    MSG_SAMPLES_HEADER,
    MSG_SET_CLEARED,
    MSG_SET_SAVED,
    MSG_SET_USAGE,
    MSG_STATUS,
    MSG_UPLOAD_READY,
    SET_FIELDS,
)
from src.credential_store import CredentialKey, Credentials, CredentialStore
from src.errors import SampleLoadError
from src.insight.client import InsightClient
from src.insight.openrouter import OpenRouterInsightClient
from src.pipeline import AnalysisObserver, AnalysisPipeline, AnalysisResult
from src.samples import SAMPLE_DEFINITIONS, SampleLoader, find_sample
from src.selection import ImageSelection

logger = logging.getLogger(__name__)

OnStatus = Callable[[str], Awaitable[None]]


class CaptionerController:
    """Owns the selection, the credential store and the pipeline for one user."""

    def __init__(
        self,
        config: Config,
        store: Optional[CredentialStore] = None,
        selection: Optional[ImageSelection] = None,
        samples: Optional[SampleLoader] = None,
        captioner: Optional[CaptionClient] = None,
        insighter: Optional[InsightClient] = None,
    ) -> None:
        self._config = config
        self._store = store or CredentialStore(Path(config.credentials_path))
        self._selection = selection or ImageSelection()
        self._samples = samples or SampleLoader(
            config.samples_base_url, timeout=config.request_timeout
        )
        self._pipeline = AnalysisPipeline(
            self._selection,
            self._store,
            captioner or HuggingFaceCaptionClient(
                config.caption_api_base, timeout=config.request_timeout
            ),
            insighter or OpenRouterInsightClient(
                config.insight_api_base,
                referer=config.app_referer,
                title=config.app_title,
                timeout=config.request_timeout,
            ),
        )

    @property
    def pipeline(self) -> AnalysisPipeline:
        return self._pipeline

    @property
    def selection(self) -> ImageSelection:
        return self._selection

    # ── credentials ───────────────────────────────────────────────────────────

    def defaults(self) -> Credentials:
        return Credentials(
            caption_api_key=self._config.caption_api_key or "",
            insight_api_key=self._config.insight_api_key or "",
            caption_model=self._config.caption_model,
            insight_model=self._config.insight_model,
        )

    def credentials(self) -> Credentials:
        return Credentials.load(self._store, self.defaults())

    def handle_set_command(self, field: str, value: str) -> str:
        match SET_FIELDS.get(field.strip().lower()):
            case None:
                return MSG_SET_USAGE
            case key_name:
                key = CredentialKey(key_name)
        cleaned = value.strip()
        self._store.set(key, cleaned)
        return (MSG_SET_SAVED if cleaned else MSG_SET_CLEARED) % field.strip().lower()

    def handle_status_command(self) -> str:
        creds = self.credentials()
        image = self._selection.current()
        match image:
            case None:
                image_line = MSG_NO_IMAGE
            case selected:
                image_line = MSG_IMAGE_SELECTED % (selected.name, len(selected.data) / 1024)
        return MSG_STATUS % (
            image_line,
            MSG_KEY_SET if creds.caption_api_key else MSG_KEY_MISSING,
            MSG_KEY_SET if creds.insight_api_key else MSG_KEY_MISSING,
            creds.caption_model or MSG_KEY_MISSING,
            creds.insight_model or MSG_KEY_MISSING,
        )

    # ── selection ─────────────────────────────────────────────────────────────

    def handle_samples_command(self) -> str:
        lines = [MSG_SAMPLES_HEADER]
        lines += list(map(
            lambda s: MSG_SAMPLE_LINE % (
                s.label,
                s.alt,
                MSG_SAMPLE_MISSING_MARK if self._samples.is_missing(s) else "",
            ),
            SAMPLE_DEFINITIONS,
        ))
        return "\n".join(lines)

    async def handle_sample_command(self, name: str, on_status: OnStatus | None = None) -> str | None:
        """Select a sample. Returns the reply, or None when a newer selection won."""
        sample = find_sample(name)
        match sample:
            case None:
                return MSG_SAMPLE_UNKNOWN % (name.strip(), self.handle_samples_command())
            case _:
                pass

        match on_status:
            case None:
                pass
            case notify:
                await notify(
                    MSG_SAMPLE_RECHECK if self._samples.is_missing(sample) else MSG_SAMPLE_LOADING
                )

        try:
            selected = await self._samples.load_into(self._selection, sample)
        except SampleLoadError as exc:
            logger.error("Sample load failed: %s", exc)
            return MSG_SAMPLE_FAILED % sample.path

        match selected:
            case None:
                return None
            case _:
                self._pipeline.reset_outputs()
                return MSG_SAMPLE_READY

    def handle_upload(self, data: bytes, name: str) -> str:
        self._selection.select_from_bytes(data, name)
        self._pipeline.reset_outputs()
        return MSG_UPLOAD_READY

    def handle_clear_command(self) -> str:
        self._selection.clear()
        self._pipeline.reset_outputs()
        return MSG_CLEARED

    # ── analysis ──────────────────────────────────────────────────────────────

    async def handle_analyze_command(
        self, prompt: str, observer: AnalysisObserver
    ) -> AnalysisResult | None:
        return await self._pipeline.analyze(
            self.credentials(), prompt.strip() or DEFAULT_PROMPT, observer
        )

    def close(self) -> None:
        self._selection.close()
