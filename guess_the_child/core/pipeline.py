"""
Caption Pipeline for Guess The Child

Walks the roster in order and asks the captioning service for one caption per
person. Calls are strictly sequential: entry i is finished before entry i+1
starts, which keeps progress reporting deterministic and puts at most one
request in flight.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Generator, List, Optional, Sequence, Union

from .config import CAPTION_PROMPT, DEFAULT_MODEL
from .media import ImageProcessor
from .roster import Entry, Photo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImagePart:
    """Inline image content for a captioning request."""

    data: bytes
    mime_type: str


@dataclass(frozen=True)
class TextPart:
    text: str


ContentPart = Union[ImagePart, TextPart]


@dataclass(frozen=True)
class CaptionRequest:
    """Ordered content parts plus the model identifier, passed through untouched."""

    parts: List[ContentPart]
    model: str


@dataclass(frozen=True)
class CaptionProgress:
    """Emitted before entry `index` (1-based) of `total` is handled."""

    index: int
    total: int

    @property
    def message(self) -> str:
        return f"Generating caption {self.index} of {self.total}..."


class CaptionGenerationError(RuntimeError):
    """Captioning failed for one entry; the whole run is abandoned."""

    def __init__(self, message: str, index: int, entry_id: str):
        super().__init__(message)
        self.index = index
        self.entry_id = entry_id


class CaptionPipeline:
    """Sequential caption generation over a roster.

    The captioner is any object with ``generate(request: CaptionRequest) -> str``.
    """

    def __init__(self,
                 captioner,
                 model: str = DEFAULT_MODEL,
                 prompt: str = CAPTION_PROMPT,
                 image_processor: Optional[ImageProcessor] = None):
        """Initialize caption pipeline.

        Args:
            captioner: Captioning service collaborator
            model: Model identifier placed in every request
            prompt: Instruction text sent after the two photos
            image_processor: Encoder for inline image payloads
        """
        self.captioner = captioner
        self.model = model
        self.prompt = prompt
        self.image_processor = image_processor or ImageProcessor()

        logger.info(f"Initialized caption pipeline with model: {model}")

    def _image_part(self, photo: Photo) -> ImagePart:
        data, mime_type = self.image_processor.to_inline_payload(photo.data, photo.mime_type)
        return ImagePart(data=data, mime_type=mime_type)

    def build_request(self, entry: Entry) -> CaptionRequest:
        """Build the request for one entry: childhood photo, current photo, prompt."""
        return CaptionRequest(
            parts=[
                self._image_part(entry.childhood),
                self._image_part(entry.current),
                TextPart(text=self.prompt),
            ],
            model=self.model,
        )

    def steps(self, entries: Sequence[Entry]) -> Generator[CaptionProgress, None, List[Entry]]:
        """Caption entries one at a time, yielding progress before each.

        Use with ``yield from`` to receive the captioned list as the return
        value. The input sequence is never modified.

        Raises:
            CaptionGenerationError: On the first entry that fails to encode or caption
        """
        total = len(entries)
        captioned: List[Entry] = []

        for i, entry in enumerate(entries, 1):
            yield CaptionProgress(index=i, total=total)

            if entry.has_caption:
                logger.debug(f"Keeping existing caption for {entry.id} ({i}/{total})")
                captioned.append(entry)
                continue

            try:
                request = self.build_request(entry)
                caption = self.captioner.generate(request)
            except Exception as e:
                logger.error(f"Caption generation failed for {entry.id} ({i}/{total}): {e}")
                raise CaptionGenerationError(str(e), index=i, entry_id=entry.id) from e

            logger.info(f"Generated caption {i}/{total} for {entry.id}")
            captioned.append(entry.with_caption(caption))

        return captioned

    def generate_captions(self,
                          entries: Sequence[Entry],
                          on_progress: Optional[Callable[[CaptionProgress], None]] = None) -> List[Entry]:
        """Caption every uncaptioned entry and return the new list.

        Args:
            entries: Roster in slide order
            on_progress: Called with each CaptionProgress before its entry is handled

        Returns:
            New list of entries, all carrying captions

        Raises:
            CaptionGenerationError: If any entry fails; nothing is returned in that case
        """
        run = self.steps(entries)
        while True:
            try:
                progress = next(run)
            except StopIteration as stop:
                return stop.value
            if on_progress is not None:
                on_progress(progress)
