"""Entry point — wires Config → CaptionerController → TelegramClient."""
import logging

from rich.logging import RichHandler

from src.config import Config
from src.constants import MSG_BOT_STARTING
from src.controller import CaptionerController
from src.telegram.client import TelegramClient


def _setup_logging(level: str) -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    list(map(root.removeHandler, root.handlers[:]))
    root.addHandler(RichHandler(rich_tracebacks=True))
    # httpx logs request URLs at INFO; Telegram URLs embed the bot token
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main() -> None:
    config = Config.from_env()
    _setup_logging(config.log_level)

    logger = logging.getLogger(__name__)
    logger.info(MSG_BOT_STARTING)

    controller = CaptionerController(config)
    client = TelegramClient(config, controller)
    try:
        client.run()
    finally:
        controller.close()


if __name__ == "__main__":
    main()
