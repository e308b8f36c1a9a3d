"""
Shelf packing algorithm for Sprite Packer.
Places sprites into rows left-to-right, top-to-bottom within a fixed canvas.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .image_entry import ImageEntry
from .sorter import SortMethod


# Canvas sizes offered in the GUI, up to 8192 on either side
ATLAS_SIZES: List[Tuple[int, int]] = [
    (256, 256),
    (512, 256),
    (512, 512),
    (1024, 512),
    (1024, 1024),
    (2048, 1024),
    (2048, 2048),
    (4096, 2048),
    (4096, 4096),
    (8192, 4096),
    (8192, 8192),
]

PADDING_OPTIONS: List[int] = [0, 1, 2, 4, 8, 16]


class InvalidConfigError(ValueError):
    """Raised for atlas configurations that can never be packed."""


@dataclass
class AtlasConfig:
    """Atlas canvas and packing parameters."""
    canvas_width: int = 1024
    canvas_height: int = 1024
    padding: int = 0
    sort_method: SortMethod = SortMethod.NAME_ASC

    def __post_init__(self):
        """Validate canvas dimensions and padding."""
        if isinstance(self.sort_method, str):
            self.sort_method = SortMethod.parse(self.sort_method)
        self.validate()

    def validate(self):
        if self.canvas_width <= 0 or self.canvas_height <= 0:
            raise InvalidConfigError(
                f"Canvas dimensions must be positive, got {self.canvas_width}x{self.canvas_height}")
        if self.padding < 0:
            raise InvalidConfigError(f"Padding must not be negative, got {self.padding}")

    @property
    def size_label(self) -> str:
        return f"{self.canvas_width}x{self.canvas_height}"

    @classmethod
    def from_size_string(cls, size: str, padding: int = 0,
                         sort_method: SortMethod = SortMethod.NAME_ASC) -> 'AtlasConfig':
        """
        Build a config from a size string such as "1024x512" or "2048".

        Raises:
            InvalidConfigError: If the size string cannot be parsed
        """
        parts = size.lower().replace(' ', '').split('x')
        try:
            if len(parts) == 1:
                width = height = int(parts[0])
            elif len(parts) == 2:
                width, height = int(parts[0]), int(parts[1])
            else:
                raise ValueError(size)
        except ValueError:
            raise InvalidConfigError(f"Invalid atlas size: {size!r}") from None
        return cls(width, height, padding, sort_method)


@dataclass(frozen=True)
class PlacedRect:
    """Position of one packed image. x/y is the content corner, padding excluded."""
    x: int
    y: int
    width: int
    height: int
    source_identifier: str


@dataclass
class PackResult:
    """Result of a packing run."""
    placed: List[PlacedRect] = field(default_factory=list)
    rejected: List[str] = field(default_factory=list)
    canvas_width: int = 0
    canvas_height: int = 0
    padding: int = 0

    @property
    def total(self) -> int:
        return len(self.placed) + len(self.rejected)

    def placement_for(self, identifier: str) -> Optional[PlacedRect]:
        """Find the placement of an entry, None if it was rejected or unknown."""
        for rect in self.placed:
            if rect.source_identifier == identifier:
                return rect
        return None

    def coverage(self) -> float:
        """Fraction of the canvas area covered by image content."""
        canvas_area = self.canvas_width * self.canvas_height
        if canvas_area == 0:
            return 0.0
        used = sum(rect.width * rect.height for rect in self.placed)
        return used / canvas_area


class ShelfPacker:
    """Greedy single-pass shelf packer."""

    def __init__(self, config: AtlasConfig):
        """
        Initialize packer with atlas configuration.

        Args:
            config: Canvas size and padding

        Raises:
            InvalidConfigError: If the configuration is invalid
        """
        config.validate()
        self.config = config
        self.logger = logging.getLogger(__name__)

    def fits_canvas(self, entry: ImageEntry) -> bool:
        """Check if an entry's padded footprint fits an empty canvas."""
        padding = self.config.padding
        return (entry.width + 2 * padding <= self.config.canvas_width and
                entry.height + 2 * padding <= self.config.canvas_height)

    def pack(self, entries: Sequence[ImageEntry]) -> PackResult:
        """
        Place entries in the given order.

        Args:
            entries: Entries already in packing order

        Returns:
            PackResult with placements and rejected identifiers
        """
        canvas_width = self.config.canvas_width
        canvas_height = self.config.canvas_height
        padding = self.config.padding

        result = PackResult(canvas_width=canvas_width, canvas_height=canvas_height, padding=padding)

        current_x = padding
        current_y = padding
        row_height = 0

        for entry in entries:
            if entry.is_degenerate:
                self.logger.warning(f"Skipping image with invalid size {entry.width}x{entry.height}: {entry.identifier}")
                result.rejected.append(entry.identifier)
                continue

            # Too large for the canvas on its own; must not trigger a row break
            if not self.fits_canvas(entry):
                self.logger.warning(f"Image larger than atlas: {entry.identifier} ({entry.width}x{entry.height})")
                result.rejected.append(entry.identifier)
                continue

            padded_width = entry.width + padding * 2
            padded_height = entry.height + padding * 2

            if current_x + padded_width > canvas_width:
                # Move to the next row
                current_x = padding
                current_y += row_height + padding
                row_height = 0

            if current_y + padded_height > canvas_height:
                self.logger.warning(f"Unable to pack image: {entry.identifier}")
                result.rejected.append(entry.identifier)
                continue

            result.placed.append(PlacedRect(
                x=current_x,
                y=current_y,
                width=entry.width,
                height=entry.height,
                source_identifier=entry.identifier
            ))

            current_x += padded_width
            row_height = max(row_height, padded_height)

        self.logger.info(f"Packed {len(result.placed)} images into {self.config.size_label} atlas "
                         f"({len(result.rejected)} rejected)")
        return result


def pack(entries: Sequence[ImageEntry], config: AtlasConfig) -> PackResult:
    """Pack already-ordered entries into an atlas."""
    return ShelfPacker(config).pack(entries)
