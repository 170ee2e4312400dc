"""TelegramClient — event-driven transport via python-telegram-bot."""
import logging
from typing import Awaitable, Callable, Optional

from telegram import Update
from telegram.ext import Application, CommandHandler, ContextTypes
from telegram.ext import MessageHandler as TGMessageHandler
from telegram.ext import filters

from src.config import Config
from src.constants import (
    CMD_ANALYZE,
    CMD_CLEAR,
    CMD_HELP,
    CMD_SAMPLE,
    CMD_SAMPLES,
    CMD_SET,
    CMD_STATUS,
    MSG_ANALYZE_BUSY,
    MSG_BLOCKED_CHAT,
    MSG_HELP,
    MSG_IMAGE_UNSUPPORTED,
    MSG_SEND_FAIL,
    MSG_SET_USAGE,
    MSG_UPLOAD_FAILED,
    UPLOAD_PHOTO_NAME,
)
from src.controller import CaptionerController
from src.telegram.observer import TelegramAnalysisObserver

logger = logging.getLogger(__name__)

# command callback signature: (sender, args) -> reply or None for no reply
OnCommand = Callable[[str, str], Awaitable[Optional[str]]]


def normalize_chat_id(s: str) -> str:
    return "".join(c for c in s if c.isdigit())


class TelegramClient:

    def __init__(self, config: Config, controller: CaptionerController) -> None:
        self._token = config.telegram_bot_token
        self._allowed_chat_id = config.allowed_chat_id
        self._controller = controller
        self._app: Optional[Application] = None

    def run(self) -> None:
        # concurrent updates let /sample and uploads race; the selection token sorts them out
        self._app = (
            Application.builder()
            .token(self._token)
            .concurrent_updates(True)
            .build()
        )
        commands: dict[str, OnCommand] = {
            CMD_HELP: self._on_help,
            CMD_STATUS: self._on_status,
            CMD_SAMPLES: self._on_samples,
            CMD_SAMPLE: self._on_sample,
            CMD_CLEAR: self._on_clear,
            CMD_SET: self._on_set,
            CMD_ANALYZE: self._on_analyze,
        }
        list(map(
            lambda item: self._app.add_handler(
                CommandHandler(item[0], self._make_command_handler(item[1]))
            ),
            commands.items(),
        ))
        self._app.add_handler(TGMessageHandler(filters.PHOTO, self._make_photo_handler()))
        self._app.add_handler(
            TGMessageHandler(filters.Document.ALL, self._make_document_handler())
        )
        self._app.run_polling()

    async def send_message(self, to: str, text: str) -> bool:
        match self._app:
            case None:
                logger.error("send_message called before run()")
                return False
            case app:
                try:
                    await app.bot.send_message(chat_id=int(to), text=text)
                    return True
                except Exception as exc:
                    logger.error(MSG_SEND_FAIL, exc)
                    return False

    # ── helpers (also used in tests) ─────────────────────────────────────────

    def _is_allowed(self, update: Update) -> bool:
        if update.effective_chat is None:
            return False
        incoming = normalize_chat_id(str(update.effective_chat.id))
        allowed = normalize_chat_id(self._allowed_chat_id)
        return incoming == allowed

    @staticmethod
    def _parse_set_args(args: str) -> tuple[str, str] | None:
        """Parse '<field> [value]' → (field, value) or None."""
        parts = args.strip().split(None, 1)
        match parts:
            case [field]:
                return (field, "")
            case [field, value]:
                return (field, value)
            case _:
                return None

    # ── command callbacks ────────────────────────────────────────────────────

    async def _on_help(self, sender: str, args: str) -> str:
        return MSG_HELP

    async def _on_status(self, sender: str, args: str) -> str:
        return self._controller.handle_status_command()

    async def _on_samples(self, sender: str, args: str) -> str:
        return self._controller.handle_samples_command()

    async def _on_sample(self, sender: str, args: str) -> str | None:
        match args.strip():
            case "":
                return self._controller.handle_samples_command()
            case name:
                return await self._controller.handle_sample_command(
                    name, on_status=lambda text: self._notify(sender, text)
                )

    async def _on_clear(self, sender: str, args: str) -> str:
        return self._controller.handle_clear_command()

    async def _on_set(self, sender: str, args: str) -> str:
        match self._parse_set_args(args):
            case None:
                return MSG_SET_USAGE
            case (field, value):
                return self._controller.handle_set_command(field, value)

    async def _on_analyze(self, sender: str, args: str) -> str | None:
        pipeline = self._controller.pipeline
        match pipeline.running:
            case True:
                return MSG_ANALYZE_BUSY
            case False:
                pass
        observer = TelegramAnalysisObserver(
            self._app.bot, sender, pipeline.caption_text, pipeline.insight_text
        )
        await self._controller.handle_analyze_command(args, observer)
        return None

    async def _notify(self, sender: str, text: str) -> None:
        await self.send_message(sender, text)

    # ── internal handler factory ──────────────────────────────────────────────

    def _make_command_handler(self, callback: OnCommand) -> Callable:
        async def _handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            match self._is_allowed(update):
                case False:
                    chat_id = update.effective_chat.id if update.effective_chat else "?"
                    logger.warning(MSG_BLOCKED_CHAT, chat_id)
                    return
                case True:
                    pass

            sender = str(update.effective_chat.id)
            reply = await callback(sender, " ".join(context.args or []))
            match reply:
                case None:
                    pass
                case text:
                    await self.send_message(sender, text)

        return _handler

    def _make_photo_handler(self) -> Callable:
        async def _handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            match self._is_allowed(update):
                case False:
                    chat_id = update.effective_chat.id if update.effective_chat else "?"
                    logger.warning(MSG_BLOCKED_CHAT, chat_id)
                    return
                case True:
                    pass

            sender = str(update.effective_chat.id)
            photos = update.message.photo if update.message else None
            match photos:
                case None | []:
                    return
                case _:
                    try:
                        tg_file = await photos[-1].get_file()
                        image_bytes = bytes(await tg_file.download_as_bytearray())
                    except Exception:
                        logger.exception("Photo download failed")
                        await self.send_message(sender, MSG_UPLOAD_FAILED)
                        return
                    reply = self._controller.handle_upload(image_bytes, UPLOAD_PHOTO_NAME)
                    await self.send_message(sender, reply)

        return _handler

    def _make_document_handler(self) -> Callable:
        async def _handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            match self._is_allowed(update):
                case False:
                    chat_id = update.effective_chat.id if update.effective_chat else "?"
                    logger.warning(MSG_BLOCKED_CHAT, chat_id)
                    return
                case True:
                    pass

            sender = str(update.effective_chat.id)
            document = update.message.document if update.message else None
            match document:
                case None:
                    return
                case doc if not (doc.mime_type or "").startswith("image/"):
                    await self.send_message(sender, MSG_IMAGE_UNSUPPORTED)
                    return
                case doc:
                    try:
                        tg_file = await doc.get_file()
                        image_bytes = bytes(await tg_file.download_as_bytearray())
                    except Exception:
                        logger.exception("Document download failed")
                        await self.send_message(sender, MSG_UPLOAD_FAILED)
                        return
                    reply = self._controller.handle_upload(image_bytes, doc.file_name or "")
                    await self.send_message(sender, reply)

        return _handler
