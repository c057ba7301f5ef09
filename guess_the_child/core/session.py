"""
Session controller for Guess The Child

One Session per browser session. It owns the roster, the view state and the
user-facing messages, and hands the roster to the caption pipeline and the
captioned result to the slideshow.

View state is a tagged variant:

    UploadView  ->  GeneratingView  ->  PresentingView
        ^                 |                   |
        +----- failure ---+                   |
        +------------------ reset ------------+
"""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Union

from .media import ImageDecodeError, ImageSource
from .pipeline import CaptionGenerationError, CaptionPipeline
from .presenter import Slideshow
from .roster import Entry, RosterEditor, Slot

logger = logging.getLogger(__name__)

EMPTY_ROSTER_MESSAGE = "Please add at least one person to the presentation."
GENERATION_FAILED_MESSAGE = "Failed to generate captions. Please check the API key and try again."
UNREADABLE_IMAGE_MESSAGE = "That file could not be read as an image. Please choose a PNG, JPEG or WebP photo."


@dataclass(frozen=True)
class UploadView:
    error: Optional[str] = None


@dataclass(frozen=True)
class GeneratingView:
    progress: str = ""


@dataclass(frozen=True)
class PresentingView:
    slideshow: Slideshow


ViewState = Union[UploadView, GeneratingView, PresentingView]


class Session:
    """Top-level controller for one slideshow session."""

    def __init__(self, pipeline: CaptionPipeline, roster: Optional[RosterEditor] = None):
        """Initialize a session in the upload view.

        Args:
            pipeline: Caption pipeline shared across sessions
            roster: Roster editor (a fresh one if None)
        """
        self.pipeline = pipeline
        self.roster = roster if roster is not None else RosterEditor(pipeline.image_processor)
        self.view: ViewState = UploadView()
        self.notice: Optional[str] = None

    @property
    def entries(self) -> List[Entry]:
        return self.roster.entries

    @property
    def error(self) -> Optional[str]:
        return self.view.error if isinstance(self.view, UploadView) else None

    @property
    def progress(self) -> str:
        return self.view.progress if isinstance(self.view, GeneratingView) else ""

    @property
    def slideshow(self) -> Optional[Slideshow]:
        return self.view.slideshow if isinstance(self.view, PresentingView) else None

    # Roster editing, only while the upload view owns the roster

    @property
    def editable(self) -> bool:
        return isinstance(self.view, UploadView)

    def select_image(self, file: ImageSource, slot: Union[Slot, str]) -> bool:
        """Store an uploaded photo in a pending slot.

        Unreadable files leave the slot unchanged and set a notice; they do
        not touch the view state or the error message.
        """
        if not self.editable:
            return False

        try:
            self.roster.select_image(file, slot)
        except ImageDecodeError as e:
            logger.warning(f"Ignoring unreadable upload for {Slot(slot).value} slot: {e}")
            self.notice = UNREADABLE_IMAGE_MESSAGE
            return False

        self.notice = None
        return True

    def clear_image(self, slot: Union[Slot, str]) -> bool:
        if not self.editable:
            return False
        self.roster.clear_slot(slot)
        self.notice = None
        return True

    def add_person(self) -> Optional[Entry]:
        return self.roster.commit_entry() if self.editable else None

    def delete_person(self, entry_id: str) -> bool:
        return self.roster.delete_entry(entry_id) if self.editable else False

    # Generation

    def start_presentation(self) -> Iterator[ViewState]:
        """Generate captions for the roster and enter the slideshow.

        Yields the view state after every change so a UI can stream progress.
        On success the roster is replaced by the captioned list; on failure
        the roster is left exactly as it was and the view returns to upload.
        """
        if not self.editable:
            logger.warning(f"Ignoring generate request in {type(self.view).__name__}")
            yield self.view
            return

        if not self.roster.entries:
            self.view = UploadView(error=EMPTY_ROSTER_MESSAGE)
            yield self.view
            return

        self.view = GeneratingView()
        yield self.view

        run = self.pipeline.steps(list(self.roster.entries))
        try:
            while True:
                try:
                    step = next(run)
                except StopIteration as stop:
                    captioned = stop.value
                    break
                self.view = GeneratingView(progress=step.message)
                yield self.view
        except CaptionGenerationError as e:
            logger.error(f"Stopped at entry {e.index} ({e.entry_id}): {e}")
            self.view = UploadView(error=GENERATION_FAILED_MESSAGE)
        else:
            self.roster.replace_entries(captioned)
            self.view = PresentingView(slideshow=Slideshow(captioned))
            logger.info(f"Presenting {len(self.view.slideshow)} slide(s)")
        finally:
            run.close()
            if isinstance(self.view, GeneratingView):
                self.view = UploadView()

        yield self.view

    def generate_captions(self) -> ViewState:
        """Run start_presentation to completion and return the final view."""
        for _ in self.start_presentation():
            pass
        return self.view

    # Presenting

    def reveal(self) -> bool:
        return self.slideshow.reveal() if self.slideshow is not None else False

    def next_slide(self) -> bool:
        return self.slideshow.next() if self.slideshow is not None else False

    def prev_slide(self) -> bool:
        return self.slideshow.prev() if self.slideshow is not None else False

    def reset(self) -> None:
        """Return to upload, discarding the roster and pending photos."""
        self.roster.reset()
        self.view = UploadView()
        self.notice = None
        logger.info("Session reset")
