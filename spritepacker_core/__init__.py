"""
Sprite Packer Core Package
Shelf packing of sprite images into fixed-size texture atlases.
"""

from .image_entry import ImageEntry, scan_folder
from .sorter import SortMethod, sort_entries
from .packer import AtlasConfig, InvalidConfigError, PackResult, PlacedRect, ShelfPacker, pack
from .renderer import AtlasRenderer

__all__ = [
    'ImageEntry',
    'scan_folder',
    'SortMethod',
    'sort_entries',
    'AtlasConfig',
    'InvalidConfigError',
    'PackResult',
    'PlacedRect',
    'ShelfPacker',
    'pack',
    'AtlasRenderer'
]
