"""
Ordering strategies for Sprite Packer.
Sorts image entries by name, file size or modification time before packing.
"""

from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .image_entry import ImageEntry


class SortMethod(Enum):
    """Supported sorting methods."""
    NAME_ASC = "name-asc"
    NAME_DESC = "name-desc"
    SIZE_ASC = "size-asc"
    SIZE_DESC = "size-desc"
    MODIFIED_ASC = "modified-asc"
    MODIFIED_DESC = "modified-desc"
    CUSTOM = "custom"

    @property
    def field(self) -> Optional[str]:
        """Sort field ("name", "size" or "modified"), None for custom."""
        if self is SortMethod.CUSTOM:
            return None
        return self.value.split('-')[0]

    @property
    def descending(self) -> bool:
        return self.value.endswith('-desc')

    @property
    def label(self) -> str:
        return SORT_LABELS[self]

    @classmethod
    def parse(cls, value: str) -> 'SortMethod':
        """
        Parse a sort method name.

        Accepts the current values as well as the older
        ``fileSize-*`` / ``updated-*`` spellings found in saved projects.
        """
        value = LEGACY_SORT_NAMES.get(value, value)
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unsupported sort method: {value}") from None


LEGACY_SORT_NAMES = {
    'fileSize-asc': 'size-asc',
    'fileSize-desc': 'size-desc',
    'updated-asc': 'modified-asc',
    'updated-desc': 'modified-desc',
}

SORT_LABELS = {
    SortMethod.NAME_ASC: "Name (A-Z)",
    SortMethod.NAME_DESC: "Name (Z-A)",
    SortMethod.SIZE_ASC: "File Size (Small - Large)",
    SortMethod.SIZE_DESC: "File Size (Large - Small)",
    SortMethod.MODIFIED_DESC: "Date Modified (Newest - Oldest)",
    SortMethod.MODIFIED_ASC: "Date Modified (Oldest - Newest)",
    SortMethod.CUSTOM: "Custom (Drag & Drop)",
}


def _sort_key(entry: ImageEntry, field: str) -> Tuple:
    # Python compares str by code point, shorter prefix first
    if field == 'name':
        return (entry.display_name,)
    elif field == 'size':
        return (entry.byte_size, entry.display_name)
    elif field == 'modified':
        return (entry.modified_at, entry.display_name)
    else:
        raise ValueError(f"Unsupported sort field: {field}")


def compare_entries(a: ImageEntry, b: ImageEntry, method: SortMethod) -> int:
    """
    Three-way comparison of two entries under a sort method.

    Returns:
        -1, 0 or 1. Always 0 for custom ordering.
    """
    if method is SortMethod.CUSTOM:
        return 0

    key_a = _sort_key(a, method.field)
    key_b = _sort_key(b, method.field)
    result = (key_a > key_b) - (key_a < key_b)
    return -result if method.descending else result


def sort_entries(entries: Sequence[ImageEntry], method: SortMethod) -> List[ImageEntry]:
    """
    Order entries for packing.

    Args:
        entries: Entries in their current order
        method: Sorting method

    Returns:
        New list; the input is never modified. Custom ordering returns the
        entries in their current order. Entries with equal keys keep their
        relative input order in both directions.
    """
    if method is SortMethod.CUSTOM:
        return list(entries)

    field = method.field
    # sorted() stays stable with reverse=True
    return sorted(entries, key=lambda e: _sort_key(e, field), reverse=method.descending)
