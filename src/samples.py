"""SampleLoader — fetches the bundled sample images into the selection."""
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from src.constants import DEFAULT_SAMPLE_NAME, MSG_SAMPLE_SUPERSEDED, SAMPLES
from src.errors import SampleLoadError
from src.selection import ImageSelection, SelectedImage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SampleDefinition:
    label: str
    path: str
    alt: str

    @property
    def file_name(self) -> str:
        return self.path.rsplit("/", 1)[-1] or DEFAULT_SAMPLE_NAME


SAMPLE_DEFINITIONS: tuple[SampleDefinition, ...] = tuple(
    SampleDefinition(label=label, path=path, alt=alt) for label, path, alt in SAMPLES
)


def find_sample(name: str) -> SampleDefinition | None:
    """Match a sample by label, file name or path, ignoring case and separators."""
    wanted = _slug(name)
    return next(
        (
            s for s in SAMPLE_DEFINITIONS
            if wanted in (_slug(s.label), _slug(s.file_name), _slug(s.path), _slug(s.file_name.rsplit(".", 1)[0]))
        ),
        None,
    )


def _slug(text: str) -> str:
    return "".join(c for c in text.lower() if c.isalnum())


class SampleLoader:

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport
        self._missing: set[str] = set()

    def is_missing(self, sample: SampleDefinition) -> bool:
        return sample.path in self._missing

    async def fetch(self, path: str) -> bytes:
        async with httpx.AsyncClient(
            base_url=self._base_url, timeout=self._timeout, transport=self._transport
        ) as client:
            try:
                response = await client.get(path, headers={"Cache-Control": "no-store"})
            except httpx.HTTPError as exc:
                raise SampleLoadError(path, reason=str(exc) or type(exc).__name__) from exc
        match response.is_success:
            case True:
                return response.content
            case False:
                raise SampleLoadError(path, status_code=response.status_code)

    async def load_into(
        self, selection: ImageSelection, sample: SampleDefinition
    ) -> SelectedImage | None:
        """Fetch ``sample`` and select it, unless a newer selection got there first.

        Returns None when the load was superseded. Raises SampleLoadError when
        the fetch failed and this load was still the latest; the selection is
        cleared in that case so nothing stale stays selected.
        """
        token = selection.begin()
        try:
            data = await self.fetch(sample.path)
        except SampleLoadError:
            self._missing.add(sample.path)
            match selection.is_current(token):
                case True:
                    selection.clear()
                    raise
                case False:
                    logger.info(MSG_SAMPLE_SUPERSEDED, sample.path)
                    return None

        self._missing.discard(sample.path)
        selected = selection.select_from_bytes(data, sample.file_name, token=token)
        match selected:
            case None:
                logger.info(MSG_SAMPLE_SUPERSEDED, sample.path)
            case _:
                pass
        return selected
