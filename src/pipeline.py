"""AnalysisPipeline — validate → caption → insight, one run at a time."""
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from src.caption.client import CaptionClient
from src.constants import (
    CAPTION_PENDING,
    CAPTION_PLACEHOLDER,
    CAPTION_UNAVAILABLE,
    INSIGHT_PENDING,
    INSIGHT_PLACEHOLDER,
    INSIGHT_UNAVAILABLE,
    MSG_ANALYSIS_BUSY,
    MSG_ANALYSIS_DONE,
    MSG_ANALYSIS_FAILED,
    MSG_MISSING_CAPTION_KEY,
    MSG_MISSING_IMAGE,
    MSG_MISSING_INSIGHT_KEY,
    MSG_RESET_DEFERRED,
    STATUS_CAPTIONING,
    STATUS_DONE,
    STATUS_FAILED,
    STATUS_INSIGHTING,
    STATUS_VALIDATING,
)
from src.credential_store import CredentialKey, Credentials, CredentialStore
from src.errors import CaptionerError, ValidationError
from src.insight.client import InsightClient
from src.selection import ImageSelection, SelectedImage

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    CAPTIONING = "captioning"
    INSIGHTING = "insighting"
    DONE = "done"
    FAILED = "failed"


class StatusTone(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class AnalysisRequest:
    credentials: Credentials
    prompt: str
    image: SelectedImage


@dataclass(frozen=True)
class AnalysisResult:
    caption: Optional[str] = None
    insight: Optional[str] = None
    error: Optional[Exception] = None


class AnalysisObserver(ABC):
    """Receives every event a run publishes. Implementations must not raise."""

    @abstractmethod
    async def on_state(self, state: PipelineState) -> None: ...

    @abstractmethod
    async def on_status(self, message: str, tone: StatusTone) -> None: ...

    @abstractmethod
    async def on_caption(self, text: str) -> None: ...

    @abstractmethod
    async def on_insight(self, text: str) -> None: ...

    @abstractmethod
    async def on_control(self, enabled: bool) -> None: ...


def validate(credentials: Credentials, image: SelectedImage | None) -> None:
    match (credentials.caption_api_key, credentials.insight_api_key, image):
        case ("", _, _):
            raise ValidationError(CredentialKey.CAPTION_API_KEY.value, MSG_MISSING_CAPTION_KEY)
        case (_, "", _):
            raise ValidationError(CredentialKey.INSIGHT_API_KEY.value, MSG_MISSING_INSIGHT_KEY)
        case (_, _, None):
            raise ValidationError("image", MSG_MISSING_IMAGE)
        case _:
            pass


class AnalysisPipeline:
    """Runs one analysis at a time and keeps the caption/insight output texts.

    The output texts outlive a run so that a failure only replaces text that
    is still a pending marker: a caption that already arrived is never hidden
    by a later insight failure. Which markers are pending is tracked per run,
    so a reset arriving mid-run cannot change the failure outcome.
    """

    def __init__(
        self,
        selection: ImageSelection,
        store: CredentialStore,
        captioner: CaptionClient,
        insighter: InsightClient,
    ) -> None:
        self._selection = selection
        self._store = store
        self._captioner = captioner
        self._insighter = insighter
        self._state = PipelineState.IDLE
        self._running = False
        self._caption_text = CAPTION_PLACEHOLDER
        self._insight_text = INSIGHT_PLACEHOLDER

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def running(self) -> bool:
        return self._running

    @property
    def caption_text(self) -> str:
        return self._caption_text

    @property
    def insight_text(self) -> str:
        return self._insight_text

    def reset_outputs(self) -> None:
        """Restore both placeholders. Skipped while a run owns the outputs."""
        match self._running:
            case True:
                logger.info(MSG_RESET_DEFERRED)
            case False:
                self._caption_text = CAPTION_PLACEHOLDER
                self._insight_text = INSIGHT_PLACEHOLDER

    async def analyze(
        self, credentials: Credentials, prompt: str, observer: AnalysisObserver
    ) -> AnalysisResult | None:
        """Run the pipeline. Returns None without doing anything if a run is in progress."""
        match self._running:
            case True:
                logger.warning(MSG_ANALYSIS_BUSY)
                return None
            case False:
                pass

        self._running = True
        start = time.time()
        caption: str | None = None
        insight: str | None = None
        error: Exception | None = None
        pending: set[str] = set()
        try:
            await observer.on_control(False)
            await self._enter(observer, PipelineState.VALIDATING, STATUS_VALIDATING)
            request = self._build_request(credentials, prompt)
            request.credentials.save(self._store)

            await self._enter(observer, PipelineState.CAPTIONING, STATUS_CAPTIONING)
            await self._set_caption(observer, CAPTION_PENDING)
            pending.add(CAPTION_PENDING)
            caption = await self._captioner.caption(
                request.credentials.caption_api_key,
                request.credentials.caption_model,
                request.image.data,
                request.image.name,
            )
            await self._set_caption(observer, caption)
            pending.discard(CAPTION_PENDING)

            await self._enter(observer, PipelineState.INSIGHTING, STATUS_INSIGHTING)
            await self._set_insight(observer, INSIGHT_PENDING)
            pending.add(INSIGHT_PENDING)
            insight = await self._insighter.insight(
                request.credentials.insight_api_key,
                request.credentials.insight_model,
                request.prompt,
                caption,
            )
            await self._set_insight(observer, insight)
            pending.discard(INSIGHT_PENDING)
            await self._enter(observer, PipelineState.DONE, STATUS_DONE, StatusTone.SUCCESS)
            logger.info(MSG_ANALYSIS_DONE, time.time() - start)
        except Exception as exc:
            error = exc
            match exc:
                case CaptionerError():
                    logger.error(MSG_ANALYSIS_FAILED, exc)
                case _:
                    logger.exception(MSG_ANALYSIS_FAILED, exc)
            await self._fail(observer, exc, pending)
        finally:
            self._running = False
            self._state = PipelineState.IDLE
            await observer.on_state(PipelineState.IDLE)
            await observer.on_control(True)

        return AnalysisResult(caption=caption, insight=insight, error=error)

    def _build_request(self, credentials: Credentials, prompt: str) -> AnalysisRequest:
        creds = credentials.stripped()
        image = self._selection.current()
        validate(creds, image)
        return AnalysisRequest(credentials=creds, prompt=prompt.strip(), image=image)

    async def _enter(
        self,
        observer: AnalysisObserver,
        state: PipelineState,
        status: str,
        tone: StatusTone = StatusTone.INFO,
    ) -> None:
        self._state = state
        await observer.on_state(state)
        await observer.on_status(status, tone)

    async def _fail(self, observer: AnalysisObserver, exc: Exception, pending: set[str]) -> None:
        # Only markers this run published and never replaced are swapped out.
        await self._enter(observer, PipelineState.FAILED, STATUS_FAILED % exc, StatusTone.ERROR)
        match CAPTION_PENDING in pending:
            case True:
                await self._set_caption(observer, CAPTION_UNAVAILABLE)
            case False:
                pass
        match INSIGHT_PENDING in pending:
            case True:
                await self._set_insight(observer, INSIGHT_UNAVAILABLE)
            case False:
                pass

    async def _set_caption(self, observer: AnalysisObserver, text: str) -> None:
        self._caption_text = text
        await observer.on_caption(text)

    async def _set_insight(self, observer: AnalysisObserver, text: str) -> None:
        self._insight_text = text
        await observer.on_insight(text)
