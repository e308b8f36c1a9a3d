"""
Image entry data structure for Sprite Packer.
Also scans folders on disk into entries ready for sorting and packing.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union

from PIL import Image


IMAGE_EXTENSIONS = {'.png', '.jpg', '.jpeg', '.gif'}

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageEntry:
    """Represents a single sprite image with the metadata used for packing."""

    identifier: str
    display_name: str
    width: int
    height: int
    byte_size: int = 0
    modified_at: int = 0  # Milliseconds since epoch

    @property
    def path(self) -> Path:
        """Identifier as a filesystem path."""
        return Path(self.identifier)

    @property
    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0


def is_image_file(path: Path) -> bool:
    """Check if a path is a regular file with a supported image extension."""
    return path.is_file() and path.suffix.lower() in IMAGE_EXTENSIONS


def entry_from_path(path: Union[str, Path]) -> ImageEntry:
    """
    Build an image entry from a file on disk.

    Args:
        path: Path to an image file

    Returns:
        ImageEntry with decoded dimensions and file stats

    Raises:
        OSError: If the file cannot be read or decoded
    """
    path = Path(path)
    stats = path.stat()

    # Only the header is parsed here, pixel data stays on disk
    with Image.open(path) as img:
        width, height = img.size

    return ImageEntry(
        identifier=str(path),
        display_name=path.stem,
        width=width,
        height=height,
        byte_size=stats.st_size,
        modified_at=stats.st_mtime_ns // 1_000_000
    )


def _try_entry(path: Path) -> Optional[ImageEntry]:
    try:
        return entry_from_path(path)
    except OSError as e:
        logger.warning(f"Could not read {path}: {e}")
        return None


def entries_from_paths(paths: Iterable[Union[str, Path]], max_workers: int = 1) -> List[ImageEntry]:
    """
    Build entries for several files, skipping unreadable ones.

    Headers may be decoded concurrently; the returned order always follows
    the order of ``paths``.
    """
    paths = [Path(p) for p in paths]

    if max_workers > 1 and len(paths) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            results = list(executor.map(_try_entry, paths))
    else:
        results = [_try_entry(p) for p in paths]

    return [entry for entry in results if entry is not None]


def scan_folder(folder: Union[str, Path], max_workers: int = 1) -> List[ImageEntry]:
    """
    Scan a folder for sprite images.

    Args:
        folder: Folder to scan (not recursive)
        max_workers: Number of threads used to decode image headers

    Returns:
        Entries for every readable image, ordered by file name

    Raises:
        FileNotFoundError: If the folder does not exist
    """
    folder_path = Path(folder)
    if not folder_path.is_dir():
        raise FileNotFoundError(f"Folder does not exist: {folder_path}")

    image_files = sorted(
        (p for p in folder_path.iterdir() if is_image_file(p)),
        key=lambda p: p.name
    )

    entries = entries_from_paths(image_files, max_workers=max_workers)
    logger.info(f"Found {len(entries)} image files in {folder_path}")
    return entries
