"""
Session state and user settings for Sprite Packer.
"""

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from .image_entry import ImageEntry, entries_from_paths, scan_folder
from .packer import AtlasConfig, PackResult, pack
from .project import ProjectSnapshot
from .renderer import DEFAULT_ZOOM, clamp_zoom
from .sorter import SortMethod, sort_entries


MAX_RECENT_FOLDERS = 10
DEFAULT_SETTINGS_PATH = Path.home() / '.spritepacker' / 'settings.json'


class NothingPackedError(RuntimeError):
    """Raised when a pack run could not place a single image."""


class AtlasSession:
    """
    Working state of one atlas being edited.

    ``entries`` is the current order of images. Under a named sort method it
    is re-sorted on every change; under custom ordering it only changes
    through explicit moves, additions and removals.
    """

    def __init__(self, config: Optional[AtlasConfig] = None, max_workers: int = 4):
        self.logger = logging.getLogger(__name__)
        self.config = replace(config) if config else AtlasConfig()
        self.folder: Optional[Path] = None
        self.entries: List[ImageEntry] = []
        self.last_result: Optional[PackResult] = None
        self.zoom = DEFAULT_ZOOM
        self.max_workers = max_workers

    @property
    def sort_method(self) -> SortMethod:
        return self.config.sort_method

    @property
    def identifiers(self) -> List[str]:
        return [entry.identifier for entry in self.entries]

    def load_folder(self, folder: Union[str, Path]) -> List[ImageEntry]:
        """Replace the entries with the images found in a folder."""
        self.folder = Path(folder)
        self.entries = sort_entries(scan_folder(self.folder, self.max_workers), self.sort_method)
        self.last_result = None
        return self.entries

    def add_files(self, paths: Iterable[Union[str, Path]]) -> List[ImageEntry]:
        """
        Append images to the session.

        Files already in the session are ignored.

        Returns:
            The newly added entries
        """
        known = set(self.identifiers)
        added = [entry for entry in entries_from_paths(paths, self.max_workers)
                 if entry.identifier not in known]
        self.entries = sort_entries(self.entries + added, self.sort_method)
        self.logger.info(f"Added {len(added)} images")
        return added

    def remove(self, identifier: str):
        """Remove an entry by identifier."""
        before = len(self.entries)
        self.entries = [entry for entry in self.entries if entry.identifier != identifier]
        if len(self.entries) == before:
            raise KeyError(identifier)

    def set_sort_method(self, method: SortMethod):
        """Change the sorting method and reorder entries accordingly."""
        self.config = replace(self.config, sort_method=method)
        self.entries = sort_entries(self.entries, method)

    def set_canvas(self, width: int, height: int):
        self.config = replace(self.config, canvas_width=width, canvas_height=height)

    def set_padding(self, padding: int):
        self.config = replace(self.config, padding=padding)

    def move(self, identifier: str, new_index: int):
        """
        Move an entry to a new position in the order.

        Switches the session to custom ordering so the manual order is kept.
        """
        old_index = self.identifiers.index(identifier)
        new_index = max(0, min(new_index, len(self.entries) - 1))

        entry = self.entries.pop(old_index)
        self.entries.insert(new_index, entry)
        self.config = replace(self.config, sort_method=SortMethod.CUSTOM)
        self.logger.debug(f"Moved {identifier} from {old_index} to {new_index}")

    def set_zoom(self, zoom: float) -> float:
        self.zoom = clamp_zoom(zoom)
        return self.zoom

    def repack(self) -> PackResult:
        """
        Sort and pack the current entries.

        The previous result is kept when nothing could be placed.

        Raises:
            NothingPackedError: If no image could be placed
        """
        ordered = sort_entries(self.entries, self.sort_method)
        result = pack(ordered, self.config)

        if not result.placed:
            raise NothingPackedError("No images were packed into the atlas")

        self.last_result = result
        return result

    def snapshot(self) -> ProjectSnapshot:
        return ProjectSnapshot(
            folder=str(self.folder) if self.folder else None,
            entries=list(self.entries),
            config=replace(self.config)
        )

    def restore(self, snapshot: ProjectSnapshot):
        """Restore folder, entry order and config from a project snapshot."""
        self.folder = Path(snapshot.folder) if snapshot.folder else None
        self.entries = list(snapshot.entries)
        self.config = replace(snapshot.config)
        self.last_result = None


class SettingsStore:
    """Persistent user preferences stored as JSON."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else DEFAULT_SETTINGS_PATH
        self.logger = logging.getLogger(__name__)
        self._data: Dict[str, Any] = self._read()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.warning(f"Could not read settings {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(self._data, f, indent=2)

    @property
    def dark_mode(self) -> bool:
        value = self._data.get('darkMode', False)
        return value if isinstance(value, bool) else False

    @dark_mode.setter
    def dark_mode(self, value: bool):
        self._data['darkMode'] = bool(value)
        self._write()

    def toggle_dark_mode(self) -> bool:
        self.dark_mode = not self.dark_mode
        return self.dark_mode

    @property
    def atlas_zoom(self) -> float:
        value = self._data.get('atlasZoomFactor', DEFAULT_ZOOM)
        # bool is an int subclass
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return DEFAULT_ZOOM
        return clamp_zoom(float(value))

    @atlas_zoom.setter
    def atlas_zoom(self, value: float):
        self._data['atlasZoomFactor'] = clamp_zoom(value)
        self._write()

    @property
    def recent_folders(self) -> List[str]:
        value = self._data.get('recentFolders', [])
        if not isinstance(value, list):
            return []
        return [folder for folder in value if isinstance(folder, str)]

    def add_recent_folder(self, folder: Union[str, Path]) -> List[str]:
        """Put a folder at the top of the recent list, keeping at most ten."""
        folder = str(folder)
        recent = [folder] + [f for f in self.recent_folders if f != folder]
        self._data['recentFolders'] = recent[:MAX_RECENT_FOLDERS]
        self._write()
        return self.recent_folders
