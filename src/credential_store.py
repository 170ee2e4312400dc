import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from src.constants import DEFAULT_CREDENTIALS_PATH

logger = logging.getLogger(__name__)

DEFAULT_STORE_PATH = Path(DEFAULT_CREDENTIALS_PATH)


class CredentialKey(str, Enum):
    CAPTION_API_KEY = "caption_api_key"
    INSIGHT_API_KEY = "insight_api_key"
    CAPTION_MODEL = "caption_model"
    INSIGHT_MODEL = "insight_model"


class CredentialStore:
    """Best-effort JSON key-value file. Storage failures are logged, never raised."""

    def __init__(self, path: Path = DEFAULT_STORE_PATH):
        self._path = path
        self._store: dict[str, str] = {}
        self._load()

    def _load(self) -> None:
        match self._path.exists():
            case True:
                try:
                    with open(self._path) as f:
                        raw = json.load(f)
                    self._store = dict(
                        filter(lambda kv: isinstance(kv[1], str) and kv[1], raw.items())
                    )
                except Exception as e:
                    logger.warning(f"Credential store load failed: {e}, starting fresh")
            case False:
                pass

    def _save(self) -> None:
        try:
            with open(self._path, "w") as f:
                json.dump(self._store, f, indent=2)
        except Exception as e:
            logger.warning(f"Credential store save failed: {e}")

    def get(self, key: CredentialKey) -> str | None:
        return self._store.get(key.value)

    def set(self, key: CredentialKey, value: str | None) -> None:
        name = key.value
        match value:
            case None | "":
                match self._store.pop(name, None):
                    case None:
                        pass
                    case _:
                        self._save()
            case _:
                self._store[name] = value
                self._save()


@dataclass(frozen=True)
class Credentials:
    caption_api_key: str = ""
    insight_api_key: str = ""
    caption_model: str = ""
    insight_model: str = ""

    @classmethod
    def load(cls, store: CredentialStore, defaults: "Credentials | None" = None) -> "Credentials":
        """Persisted values win; absent keys fall back to ``defaults``."""
        base = defaults or cls()
        return cls(
            caption_api_key=store.get(CredentialKey.CAPTION_API_KEY) or base.caption_api_key,
            insight_api_key=store.get(CredentialKey.INSIGHT_API_KEY) or base.insight_api_key,
            caption_model=store.get(CredentialKey.CAPTION_MODEL) or base.caption_model,
            insight_model=store.get(CredentialKey.INSIGHT_MODEL) or base.insight_model,
        )

    def save(self, store: CredentialStore) -> None:
        store.set(CredentialKey.CAPTION_API_KEY, self.caption_api_key)
        store.set(CredentialKey.INSIGHT_API_KEY, self.insight_api_key)
        store.set(CredentialKey.CAPTION_MODEL, self.caption_model)
        store.set(CredentialKey.INSIGHT_MODEL, self.insight_model)

    def stripped(self) -> "Credentials":
        return Credentials(
            caption_api_key=self.caption_api_key.strip(),
            insight_api_key=self.insight_api_key.strip(),
            caption_model=self.caption_model.strip(),
            insight_model=self.insight_model.strip(),
        )
