"""TDD: TelegramClient tests written FIRST"""
import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.config import Config
from src.controller import CaptionerController
from src.pipeline import PipelineState, StatusTone
from src.telegram.client import TelegramClient, normalize_chat_id
from src.telegram.observer import TelegramAnalysisObserver


def make_config(*, token: str = "test-token", chat_id: str = "123456789") -> Config:
    return Config(
        telegram_bot_token=token,
        allowed_chat_id=chat_id,
        log_level="INFO",
        credentials_path=".creds.json",
        samples_base_url="http://samples.test",
        caption_api_base="https://hf.test",
        insight_api_base="https://openrouter.test/api/v1",
        caption_model="Salesforce/blip-image-captioning-large",
        insight_model="mistralai/mistral-7b-instruct",
        caption_api_key=None,
        insight_api_key=None,
        app_referer="https://app.test",
        app_title="Smart Vision Captioner Agent",
        request_timeout=None,
    )


def make_update(*, chat_id: int) -> MagicMock:
    """Build a minimal mock of a python-telegram-bot Update."""
    update = MagicMock()
    update.effective_chat.id = chat_id
    return update


def make_client(chat_id: str = "123456789") -> tuple[TelegramClient, MagicMock]:
    controller = MagicMock(spec=CaptionerController)
    client = TelegramClient(make_config(chat_id=chat_id), controller)
    client.send_message = AsyncMock(return_value=True)
    return client, controller


def make_context(args: list[str]) -> MagicMock:
    context = MagicMock()
    context.args = args
    return context


# ── allowed-chat filter ───────────────────────────────────────────────────────


def test_allowed_chat_id_passes_filter():
    client, _ = make_client("123456789")
    assert client._is_allowed(make_update(chat_id=123456789))


def test_blocked_chat_id_fails_filter():
    client, _ = make_client("123456789")
    assert not client._is_allowed(make_update(chat_id=999999999))


def test_update_without_chat_fails_filter():
    client, _ = make_client()
    update = MagicMock()
    update.effective_chat = None
    assert not client._is_allowed(update)


def test_normalize_chat_id_keeps_digits():
    assert normalize_chat_id(" 123-456 ") == "123456"


# ── /set argument parsing ─────────────────────────────────────────────────────


def test_parse_set_args_field_and_value():
    assert TelegramClient._parse_set_args("caption_key hf_abc") == ("caption_key", "hf_abc")


def test_parse_set_args_value_keeps_spaces():
    assert TelegramClient._parse_set_args("insight_model a b") == ("insight_model", "a b")


def test_parse_set_args_field_only_clears():
    assert TelegramClient._parse_set_args("caption_key") == ("caption_key", "")


def test_parse_set_args_empty_returns_none():
    assert TelegramClient._parse_set_args("   ") is None


# ── command handlers ──────────────────────────────────────────────────────────


async def test_command_handler_replies_with_callback_result():
    client, controller = make_client()
    controller.handle_set_command.return_value = "Saved caption_key."
    handler = client._make_command_handler(client._on_set)

    await handler(make_update(chat_id=123456789), make_context(["caption_key", "hf_abc"]))

    controller.handle_set_command.assert_called_once_with("caption_key", "hf_abc")
    client.send_message.assert_awaited_once_with("123456789", "Saved caption_key.")


async def test_command_handler_ignores_blocked_chat():
    client, controller = make_client("123456789")
    handler = client._make_command_handler(client._on_clear)

    await handler(make_update(chat_id=999), make_context([]))

    controller.handle_clear_command.assert_not_called()
    client.send_message.assert_not_awaited()


async def test_sample_without_name_lists_samples():
    client, controller = make_client()
    controller.handle_samples_command.return_value = "Samples"

    assert await client._on_sample("123456789", "") == "Samples"
    controller.handle_sample_command.assert_not_called()


async def test_superseded_sample_sends_no_reply():
    client, controller = make_client()
    controller.handle_sample_command = AsyncMock(return_value=None)
    handler = client._make_command_handler(client._on_sample)

    await handler(make_update(chat_id=123456789), make_context(["classroom"]))

    client.send_message.assert_not_awaited()


async def test_analyze_while_running_reports_busy():
    client, controller = make_client()
    controller.pipeline = MagicMock(running=True)

    reply = await client._on_analyze("123456789", "prompt")

    assert reply.startswith("An analysis is already running")
    controller.handle_analyze_command.assert_not_called()


async def test_photo_handler_selects_largest_photo():
    client, controller = make_client()
    controller.handle_upload.return_value = "📂 Custom image ready. Provide keys to continue."
    tg_file = MagicMock()
    tg_file.download_as_bytearray = AsyncMock(return_value=bytearray(b"jpeg"))
    small, large = MagicMock(), MagicMock()
    large.get_file = AsyncMock(return_value=tg_file)
    update = make_update(chat_id=123456789)
    update.message.photo = [small, large]

    await client._make_photo_handler()(update, make_context([]))

    controller.handle_upload.assert_called_once_with(b"jpeg", "photo.jpg")
    client.send_message.assert_awaited_once()


async def test_document_handler_rejects_non_images():
    client, controller = make_client()
    update = make_update(chat_id=123456789)
    update.message.document.mime_type = "application/pdf"

    await client._make_document_handler()(update, make_context([]))

    controller.handle_upload.assert_not_called()
    client.send_message.assert_awaited_once_with("123456789", "Only image files can be analyzed.")


async def test_document_handler_uses_file_name():
    client, controller = make_client()
    tg_file = MagicMock()
    tg_file.download_as_bytearray = AsyncMock(return_value=bytearray(b"png"))
    update = make_update(chat_id=123456789)
    update.message.document.mime_type = "image/png"
    update.message.document.file_name = "board.png"
    update.message.document.get_file = AsyncMock(return_value=tg_file)

    await client._make_document_handler()(update, make_context([]))

    controller.handle_upload.assert_called_once_with(b"png", "board.png")


async def test_photo_download_failure_reports_error():
    client, controller = make_client()
    photo = MagicMock()
    photo.get_file = AsyncMock(side_effect=RuntimeError("network"))
    update = make_update(chat_id=123456789)
    update.message.photo = [photo]

    await client._make_photo_handler()(update, make_context([]))

    controller.handle_upload.assert_not_called()
    client.send_message.assert_awaited_once_with(
        "123456789", "Could not download that image — please try again."
    )


# ── analysis observer ─────────────────────────────────────────────────────────


def make_bot() -> MagicMock:
    bot = MagicMock()
    bot.send_message = AsyncMock(return_value=MagicMock(message_id=42))
    bot.edit_message_text = AsyncMock()
    bot.send_chat_action = AsyncMock()
    return bot


async def test_observer_sends_panel_then_edits_it():
    bot = make_bot()
    observer = TelegramAnalysisObserver(bot, "123456789", "Awaiting analysis...", "Your insight will appear here.")

    await observer.on_status("🔐 Validating inputs...", StatusTone.INFO)
    await observer.on_caption("a burnt circuit board")

    bot.send_message.assert_awaited_once()
    bot.edit_message_text.assert_awaited_once()
    edit_kwargs = bot.edit_message_text.call_args.kwargs
    assert edit_kwargs["message_id"] == 42
    assert "a burnt circuit board" in edit_kwargs["text"]
    assert "Your insight will appear here." in edit_kwargs["text"]


async def test_observer_swallows_telegram_errors():
    bot = make_bot()
    bot.send_message = AsyncMock(side_effect=RuntimeError("flood control"))
    observer = TelegramAnalysisObserver(bot, "123456789", "", "")

    await observer.on_status("❌ boom", StatusTone.ERROR)

    assert observer.tone == StatusTone.ERROR


async def test_observer_tracks_state():
    observer = TelegramAnalysisObserver(make_bot(), "123456789", "", "")
    await observer.on_state(PipelineState.CAPTIONING)
    assert observer.state == PipelineState.CAPTIONING


async def test_observer_typing_runs_while_control_disabled():
    bot = make_bot()
    observer = TelegramAnalysisObserver(bot, "123456789", "", "")

    await observer.on_control(False)
    await asyncio.sleep(0)
    await observer.on_control(True)

    bot.send_chat_action.assert_awaited()
    assert observer._task is None
