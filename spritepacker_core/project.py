"""
Project files for Sprite Packer.
Saves and restores folder, entries and atlas settings as JSON.
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .image_entry import ImageEntry
from .packer import AtlasConfig
from .sorter import SortMethod


PROJECT_VERSION = 1
DEFAULT_PROJECT_FILENAME = "texture_atlas_project.json"

logger = logging.getLogger(__name__)


class ProjectFormatError(ValueError):
    """Raised when a project document cannot be understood."""


@dataclass
class ProjectSnapshot:
    """Everything needed to reproduce a packing run."""
    folder: Optional[str]
    entries: List[ImageEntry] = field(default_factory=list)
    config: AtlasConfig = field(default_factory=AtlasConfig)

    @property
    def sort_method(self) -> SortMethod:
        return self.config.sort_method

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': PROJECT_VERSION,
            'folder': self.folder,
            'entries': [asdict(entry) for entry in self.entries],
            'atlasConfig': {
                'canvasWidth': self.config.canvas_width,
                'canvasHeight': self.config.canvas_height,
                'padding': self.config.padding,
            },
            'sortMethod': self.config.sort_method.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProjectSnapshot':
        """
        Build a snapshot from a parsed project document.

        Raises:
            ProjectFormatError: If required fields are missing or invalid
        """
        try:
            atlas = data['atlasConfig']
            config = AtlasConfig(
                canvas_width=int(atlas['canvasWidth']),
                canvas_height=int(atlas['canvasHeight']),
                padding=int(atlas['padding']),
                sort_method=SortMethod.parse(data['sortMethod'])
            )
            entries = [
                ImageEntry(
                    identifier=item['identifier'],
                    display_name=item['display_name'],
                    width=int(item['width']),
                    height=int(item['height']),
                    byte_size=int(item.get('byte_size', 0)),
                    modified_at=int(item.get('modified_at', 0))
                )
                for item in data.get('entries', [])
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise ProjectFormatError(f"Invalid project file: {e}") from e

        return cls(folder=data.get('folder'), entries=entries, config=config)


def save_project(snapshot: ProjectSnapshot, path: Union[str, Path]) -> Path:
    """
    Write a project snapshot as indented JSON.

    Args:
        snapshot: Project state to save
        path: Destination file

    Returns:
        Path that was written
    """
    path = Path(path)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(snapshot.to_dict(), f, indent=2)
    logger.info(f"Project saved: {path} ({len(snapshot.entries)} entries)")
    return path


def load_project(path: Union[str, Path]) -> ProjectSnapshot:
    """
    Read a project snapshot.

    Raises:
        OSError: If the file cannot be read
        ProjectFormatError: If the document is not a valid project
    """
    path = Path(path)
    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ProjectFormatError(f"Project file is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ProjectFormatError("Project file must contain a JSON object")

    snapshot = ProjectSnapshot.from_dict(data)
    logger.info(f"Project loaded: {path} ({len(snapshot.entries)} entries)")
    return snapshot
