"""
Roster management for Guess The Child

Holds the people being assembled for a slideshow: two pending upload slots
(childhood and current photo) and the ordered list of committed entries.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

from PIL import Image

from .media import ImageDecodeError, ImageProcessor, ImageSource
from .tokens import generate_entry_id, is_valid_entry_id

logger = logging.getLogger(__name__)


class Slot(str, Enum):
    """Pending upload slot names."""

    CHILDHOOD = "childhood"
    CURRENT = "current"


@dataclass(frozen=True)
class Photo:
    """One decoded image: raw payload, mime type and browser preview."""

    data: bytes
    mime_type: str
    preview: Image.Image
    filename: str = ""


@dataclass(frozen=True)
class Entry:
    """One person in the slideshow."""

    id: str
    childhood: Photo
    current: Photo
    caption: Optional[str] = None

    @property
    def has_caption(self) -> bool:
        return bool(self.caption)

    def with_caption(self, caption: str) -> "Entry":
        """Return a copy of this entry carrying the caption."""
        return replace(self, caption=caption)


class RosterEditor:
    """Builds the ordered list of entries from pairs of uploaded photos."""

    def __init__(self, image_processor: Optional[ImageProcessor] = None):
        """Initialize an empty roster.

        Args:
            image_processor: Decoder used by select_image (default settings if None)
        """
        self.image_processor = image_processor or ImageProcessor()
        self.entries: List[Entry] = []
        self.pending: Dict[Slot, Optional[Photo]] = {slot: None for slot in Slot}

    def __len__(self) -> int:
        return len(self.entries)

    def select_image(self, file: ImageSource, slot: Union[Slot, str]) -> Photo:
        """Decode an uploaded file and store it in a pending slot.

        Any photo already in the slot is overwritten.

        Args:
            file: Path to the uploaded file or its raw bytes
            slot: Target slot ('childhood' or 'current')

        Returns:
            The stored Photo

        Raises:
            ImageDecodeError: If the file is not a readable image; the slot is left unchanged
        """
        slot = Slot(slot)
        if isinstance(file, (str, Path)) and Path(file).suffix and not ImageProcessor.is_supported(file):
            raise ImageDecodeError(f"Unsupported file type: {Path(file).suffix}")

        data, mime_type, preview = self.image_processor.decode(file)
        filename = Path(file).name if isinstance(file, (str, Path)) else ""

        photo = Photo(data=data, mime_type=mime_type, preview=preview, filename=filename)
        self.pending[slot] = photo
        logger.debug(f"Stored {mime_type} photo in {slot.value} slot")
        return photo

    @property
    def can_commit(self) -> bool:
        return all(photo is not None for photo in self.pending.values())

    def commit_entry(self) -> Optional[Entry]:
        """Turn the two pending photos into a new entry.

        Returns:
            The new Entry, or None if either slot is empty
        """
        if not self.can_commit:
            return None

        entry = Entry(
            id=generate_entry_id(),
            childhood=self.pending[Slot.CHILDHOOD],
            current=self.pending[Slot.CURRENT],
        )
        self.entries.append(entry)
        self.clear_pending()

        logger.info(f"Added {entry.id} to roster ({len(self.entries)} total)")
        return entry

    def delete_entry(self, entry_id: str) -> bool:
        """Remove the entry with the given id.

        Returns:
            True if an entry was removed, False if the id was not present
        """
        if not is_valid_entry_id(entry_id):
            logger.warning(f"Ignoring delete for malformed entry id: {entry_id!r}")
            return False

        remaining = [entry for entry in self.entries if entry.id != entry_id]
        if len(remaining) == len(self.entries):
            return False

        self.entries = remaining
        logger.info(f"Removed {entry_id} from roster ({len(self.entries)} left)")
        return True

    def clear_slot(self, slot: Union[Slot, str]) -> None:
        """Empty one pending slot, e.g. when the user removes the upload."""
        slot = Slot(slot)
        self.pending[slot] = None
        logger.debug(f"Cleared {slot.value} slot")

    def replace_entries(self, entries: List[Entry]) -> None:
        """Swap in a new roster, e.g. the captioned list from the pipeline."""
        self.entries = list(entries)

    def clear_pending(self) -> None:
        for slot in Slot:
            self.pending[slot] = None

    def reset(self) -> None:
        """Discard all entries and pending photos."""
        self.entries = []
        self.clear_pending()
