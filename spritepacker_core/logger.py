"""
Logging system for Sprite Packer.
Handles application logging and the report written next to exported atlases.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional


def setup_logging(log_level: int = logging.INFO) -> None:
    """Setup basic logging configuration."""
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )


def log_project(log_path: Path, project_name: str, timestamp: datetime,
                canvas_width: int, canvas_height: int, padding: int,
                sort_method: str, num_files: int, output_path: Path,
                process_time: float, images_placed: int,
                rejected: Optional[list] = None,
                error: Optional[str] = None) -> None:
    """
    Log complete atlas export information to file.

    Args:
        log_path: Path to log file
        project_name: Name of the project
        timestamp: Start timestamp
        canvas_width: Atlas width in pixels
        canvas_height: Atlas height in pixels
        padding: Padding around each sprite
        sort_method: Sorting method used before packing
        num_files: Number of input files
        output_path: Path to output PNG
        process_time: Processing time in seconds
        images_placed: Number of images drawn into the atlas
        rejected: Identifiers of images that did not fit
        error: Error message if any
    """
    rejected = rejected or []

    log_content = f"""Sprite Packer - Atlas Log
{'=' * 50}

Project Information:
    Project Name: {project_name}
    Timestamp: {timestamp.strftime('%Y-%m-%d %H:%M:%S')}

Input Parameters:
    Atlas Size: {canvas_width} x {canvas_height} pixels
    Padding: {padding} pixels
    Sort Method: {sort_method}
    Input Files: {num_files}
    Images Placed: {images_placed}
    Images Rejected: {len(rejected)}

Output Information:
    Output Path: {output_path.name}
    Total Pixels: {canvas_width * canvas_height:,}

Process Information:
    Processing Time: {process_time:.2f} seconds
    Completion Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}

"""

    if rejected:
        log_content += "Rejected Images:\n"
        for identifier in rejected:
            log_content += f"    {identifier}\n"
        log_content += "\n"

    if error:
        log_content += f"""Error Information:
    Error: {error}
    Status: FAILED

"""

    success_rate = (images_placed / num_files * 100) if num_files > 0 else 0
    status = "SUCCESS" if not error and images_placed == num_files else "PARTIAL" if images_placed > 0 else "FAILED"

    log_content += f"""Summary:
    Project: {project_name}
    Files Packed: {images_placed}/{num_files}
    Success Rate: {success_rate:.1f}%
    Final Status: {status}

"""

    # Write to log file
    try:
        with open(log_path, 'w', encoding='utf-8') as f:
            f.write(log_content)
    except OSError as e:
        logger = logging.getLogger(__name__)
        logger.error(f"Failed to write log file {log_path}: {e}")


def generate_log_filename(project_name: str) -> str:
    """
    Generate standardized log filename.

    Args:
        project_name: Name of the project

    Returns:
        Formatted log filename
    """
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    return f"{project_name}_{timestamp}_atlas.log"


def generate_atlas_filename(project_name: str) -> str:
    """Generate standardized atlas PNG filename."""
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    return f"{project_name}_{timestamp}_atlas.png"
