"""TelegramAnalysisObserver — renders a pipeline run as one live-edited chat message."""
import asyncio
import logging

from telegram import Bot, Message
from telegram.constants import ChatAction

from src.constants import MSG_PANEL, MSG_PANEL_EDIT_FAILED, TELEGRAM_TYPING_INTERVAL
from src.pipeline import AnalysisObserver, PipelineState, StatusTone

logger = logging.getLogger(__name__)


async def _keep_typing(bot: Bot, chat_id: str, stop: asyncio.Event) -> None:
    while not stop.is_set():
        try:
            await bot.send_chat_action(chat_id=int(chat_id), action=ChatAction.TYPING)
        except Exception as exc:
            logger.debug("Typing action failed: %s", exc)
        await asyncio.sleep(TELEGRAM_TYPING_INTERVAL)


class TelegramAnalysisObserver(AnalysisObserver):
    """Status, caption and insight share one panel message.

    The panel is sent on the first status and edited afterwards. While the
    analyze control is disabled a typing indicator keeps running.
    """

    def __init__(self, bot: Bot, chat_id: str, caption: str, insight: str) -> None:
        self._bot = bot
        self._chat_id = chat_id
        self._status = ""
        self._caption = caption
        self._insight = insight
        self._tone = StatusTone.INFO
        self._state = PipelineState.IDLE
        self._panel: Message | None = None
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task | None = None

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def tone(self) -> StatusTone:
        return self._tone

    def render(self) -> str:
        return MSG_PANEL % (self._status, self._caption, self._insight)

    async def on_state(self, state: PipelineState) -> None:
        self._state = state

    async def on_status(self, message: str, tone: StatusTone) -> None:
        self._status = message
        self._tone = tone
        await self._refresh()

    async def on_caption(self, text: str) -> None:
        self._caption = text
        await self._refresh()

    async def on_insight(self, text: str) -> None:
        self._insight = text
        await self._refresh()

    async def on_control(self, enabled: bool) -> None:
        match enabled:
            case False:
                await self._start_typing()
            case True:
                await self._stop_typing()

    async def _refresh(self) -> None:
        text = self.render()
        try:
            match self._panel:
                case None:
                    self._panel = await self._bot.send_message(chat_id=int(self._chat_id), text=text)
                case panel:
                    await self._bot.edit_message_text(
                        chat_id=int(self._chat_id), message_id=panel.message_id, text=text
                    )
        except Exception as exc:
            logger.warning(MSG_PANEL_EDIT_FAILED, exc)

    async def _start_typing(self) -> None:
        await self._stop_typing()
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(
            _keep_typing(self._bot, self._chat_id, self._stop_event)
        )

    async def _stop_typing(self) -> None:
        match self._stop_event:
            case None:
                pass
            case event:
                event.set()

        match self._task:
            case None:
                pass
            case task:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
                self._task = None

        self._stop_event = None
