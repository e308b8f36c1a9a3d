"""
Rendering engine for Sprite Packer.
Handles atlas compositing, PNG export, previews and file thumbnails.
"""

import logging
import math
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image, ImageDraw

from .logger import log_project
from .packer import PackResult


MIN_ZOOM = 0.1
MAX_ZOOM = 5.0
DEFAULT_ZOOM = 0.6
PREVIEW_BASE_SIZE = 1024
CHECKER_COLORS = ('#FFFFFF', '#DDDDDD')


def clamp_zoom(zoom: float) -> float:
    """Clamp a zoom factor to the supported range."""
    return max(MIN_ZOOM, min(MAX_ZOOM, zoom))


def format_file_size(size: int) -> str:
    """Format a byte count for display."""
    if size < 1024:
        return f"{size} B"
    elif size < 1048576:
        return f"{size / 1024:.1f} KB"
    else:
        return f"{size / 1048576:.1f} MB"


class AtlasRenderer:
    """Handles atlas rendering for Sprite Packer."""

    def __init__(self):
        """Initialize the renderer."""
        self.logger = logging.getLogger(__name__)

    def compose(self, pack_result: PackResult) -> Tuple[Image.Image, int]:
        """
        Composite all placed images into a transparent RGBA atlas.

        Images are drawn at their placed position without scaling. Images that
        cannot be loaded are skipped and logged.

        Args:
            pack_result: Packing layout result

        Returns:
            Tuple of:
            - atlas: Image of the configured canvas size
            - images_placed: Number of images actually drawn
        """
        canvas_size = (pack_result.canvas_width, pack_result.canvas_height)
        self.logger.info(f"Rendering atlas {canvas_size[0]}x{canvas_size[1]} with {len(pack_result.placed)} images")

        canvas = Image.new('RGBA', canvas_size, (0, 0, 0, 0))
        images_placed = 0

        for rect in pack_result.placed:
            try:
                with Image.open(rect.source_identifier) as img:
                    sprite = img.convert('RGBA')
                    if sprite.size != (rect.width, rect.height):
                        self.logger.warning(f"Size of {rect.source_identifier} changed since scan: "
                                            f"{sprite.width}x{sprite.height}, expected {rect.width}x{rect.height}")
                        sprite = sprite.crop((0, 0, rect.width, rect.height))
                    canvas.paste(sprite, (rect.x, rect.y), sprite)
                    images_placed += 1
            except OSError as e:
                self.logger.error(f"Could not place image {rect.source_identifier}: {e}")
                continue

        return canvas, images_placed

    def save_atlas(self, pack_result: PackResult, output_path: Path, compress_level: int = 6,
                   log_path: Optional[Path] = None, project_name: str = "atlas",
                   sort_method: str = "custom") -> Image.Image:
        """
        Render and save the atlas as PNG.

        Args:
            pack_result: Packing layout result
            output_path: Output path for the PNG
            compress_level: zlib compression level 0-9
            log_path: Optional path for the atlas log
            project_name: Project name for logging
            sort_method: Sort method name for logging

        Returns:
            The composed atlas image
        """
        start_time = datetime.now()
        output_path = Path(output_path)
        self.logger.info(f"Saving atlas: {output_path}")

        try:
            atlas, images_placed = self.compose(pack_result)
            atlas.save(output_path, format='PNG', compress_level=compress_level)
        except Exception as e:
            self.logger.error(f"Error saving atlas: {e}", exc_info=True)
            if log_path:
                self._write_log(log_path, project_name, start_time, pack_result, output_path,
                                sort_method, images_placed=0, error=str(e))
            raise

        if log_path:
            self._write_log(log_path, project_name, start_time, pack_result, output_path,
                            sort_method, images_placed=images_placed)

        self.logger.info(f"Atlas saved: {output_path} ({images_placed} images placed)")
        return atlas

    def _write_log(self, log_path: Path, project_name: str, start_time: datetime,
                   pack_result: PackResult, output_path: Path, sort_method: str,
                   images_placed: int, error: Optional[str] = None):
        process_time = (datetime.now() - start_time).total_seconds()
        log_project(
            log_path=Path(log_path),
            project_name=project_name,
            timestamp=start_time,
            canvas_width=pack_result.canvas_width,
            canvas_height=pack_result.canvas_height,
            padding=pack_result.padding,
            sort_method=sort_method,
            num_files=pack_result.total,
            output_path=output_path,
            process_time=process_time,
            images_placed=images_placed,
            rejected=pack_result.rejected,
            error=error
        )

    def render_preview(self, atlas: Image.Image, zoom: float = DEFAULT_ZOOM,
                       base_size: int = PREVIEW_BASE_SIZE) -> Image.Image:
        """
        Scale the atlas onto a checkerboard for on-screen preview.

        Args:
            atlas: Composed atlas image
            zoom: Zoom factor, clamped to [0.1, 5.0]
            base_size: Preview edge length at zoom 1.0

        Returns:
            Square RGB preview image
        """
        zoom = clamp_zoom(zoom)
        scaled_size = math.ceil(base_size * zoom)

        preview = Image.new('RGB', (scaled_size, scaled_size), CHECKER_COLORS[0])
        self._draw_checkerboard(preview, max(1, math.ceil(10 * zoom)))

        scaled = atlas.convert('RGBA').resize((scaled_size, scaled_size), Image.Resampling.NEAREST)
        preview.paste(scaled, (0, 0), scaled)
        return preview

    def _draw_checkerboard(self, canvas: Image.Image, tile_size: int):
        """
        Draw a checkerboard to show transparency.

        Args:
            canvas: Canvas image to draw on
            tile_size: Edge length of a single tile
        """
        draw = ImageDraw.Draw(canvas)
        for x in range(0, canvas.width, tile_size):
            for y in range(0, canvas.height, tile_size):
                if ((x // tile_size) + (y // tile_size)) % 2 == 1:
                    draw.rectangle([x, y, x + tile_size - 1, y + tile_size - 1], fill=CHECKER_COLORS[1])

    def thumbnail(self, path: Path, size: int = 50) -> Image.Image:
        """
        Create a file list thumbnail.

        The image is fitted inside a size x size transparent square,
        keeping its aspect ratio.
        """
        with Image.open(path) as img:
            fitted = self._fit_within(img.convert('RGBA'), (size, size))

        thumb = Image.new('RGBA', (size, size), (0, 0, 0, 0))
        offset = ((size - fitted.width) // 2, (size - fitted.height) // 2)
        thumb.paste(fitted, offset, fitted)
        return thumb

    def _fit_within(self, img: Image.Image, box: Tuple[int, int]) -> Image.Image:
        """
        Resize image to fit within box while maintaining aspect ratio.

        Args:
            img: Source image
            box: Maximum (width, height)

        Returns:
            Resized image
        """
        scale_factor = min(box[0] / img.width, box[1] / img.height)

        new_width = max(1, int(round(img.width * scale_factor)))
        new_height = max(1, int(round(img.height * scale_factor)))

        return img.resize((new_width, new_height), Image.Resampling.LANCZOS)
