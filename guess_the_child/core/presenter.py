"""
Slideshow Presenter for Guess The Child

Per-slide reveal state machine. Each slide starts in the guessing phase
(childhood photo only); reveal() shows the current photo and caption.
Moving to another slide always returns to the guessing phase.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from PIL import Image

from .roster import Entry

logger = logging.getLogger(__name__)

GUESS_HEADING = "Guess Who?"
REVEAL_HINT = "Click anywhere to reveal"
NO_DATA_MESSAGE = "No presentation data available."


class SlidePhase(Enum):
    GUESSING = "guessing"
    REVEALED = "revealed"


@dataclass(frozen=True)
class SlideView:
    """What the current slide shows.

    In the guessing phase only the childhood photo, the heading and the
    call to action are visible. Once revealed, both photos are labelled
    "Then"/"Now" and the caption is shown.
    """

    index: int
    total: int
    phase: SlidePhase
    childhood: Image.Image
    current: Optional[Image.Image] = None
    caption: Optional[str] = None
    has_prev: bool = False
    has_next: bool = False

    THEN_LABEL = "Then"
    NOW_LABEL = "Now"

    @property
    def revealed(self) -> bool:
        return self.phase is SlidePhase.REVEALED

    @property
    def counter(self) -> str:
        return f"{self.index + 1} / {self.total}"

    @property
    def heading(self) -> str:
        return "" if self.revealed else GUESS_HEADING

    @property
    def hint(self) -> str:
        return "" if self.revealed else REVEAL_HINT

    @property
    def quoted_caption(self) -> str:
        return f'"{self.caption}"' if self.revealed and self.caption else ""


class Slideshow:
    """Reveal-style slideshow over captioned entries."""

    def __init__(self, entries: Sequence[Entry]):
        """Initialize slideshow at the first slide, unrevealed.

        Args:
            entries: Captioned roster; entries without a caption are left out
        """
        self.slides: List[Entry] = [entry for entry in entries if entry.has_caption]
        self.index = 0
        self.revealed = False

        skipped = len(entries) - len(self.slides)
        if skipped:
            logger.warning(f"Skipping {skipped} entr{'y' if skipped == 1 else 'ies'} without a caption")

    def __len__(self) -> int:
        return len(self.slides)

    @property
    def is_empty(self) -> bool:
        return not self.slides

    @property
    def cursor(self) -> Tuple[int, bool]:
        return self.index, self.revealed

    @property
    def phase(self) -> SlidePhase:
        return SlidePhase.REVEALED if self.revealed else SlidePhase.GUESSING

    @property
    def current(self) -> Optional[Entry]:
        if self.is_empty:
            return None
        return self.slides[self.index]

    @property
    def has_prev(self) -> bool:
        return self.index > 0

    @property
    def has_next(self) -> bool:
        return self.index < len(self.slides) - 1

    def reveal(self) -> bool:
        """Show the current photo and caption. Returns True if the phase changed."""
        if self.is_empty or self.revealed:
            return False
        self.revealed = True
        return True

    def next(self) -> bool:
        """Advance one slide. Returns True if the slide changed."""
        if not self.has_next:
            return False
        self.index += 1
        self.revealed = False
        return True

    def prev(self) -> bool:
        """Go back one slide. Returns True if the slide changed."""
        if not self.has_prev:
            return False
        self.index -= 1
        self.revealed = False
        return True

    def render(self) -> Optional[SlideView]:
        """Describe the current slide, or None when there is nothing to show."""
        entry = self.current
        if entry is None:
            return None

        return SlideView(
            index=self.index,
            total=len(self.slides),
            phase=self.phase,
            childhood=entry.childhood.preview,
            current=entry.current.preview if self.revealed else None,
            caption=entry.caption if self.revealed else None,
            has_prev=self.has_prev,
            has_next=self.has_next,
        )
