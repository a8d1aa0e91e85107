#!/usr/bin/env python3
"""
File utility functions for the Bakalari Timetable application.
"""
import json
import logging
import os
from typing import Any, Dict, List, Union

from bakalari_timetable.models import Timetable

logger = logging.getLogger(__name__)


def save_json_data(
    data: Union[Dict[str, Any], List[Any], Timetable],
    output_path: str,
    create_dirs: bool = True,
    indent: int = 2
) -> str:
    """
    Save data to a JSON file with consistent settings.

    Args:
        data: The data to save (dict, list or Timetable model)
        output_path: Path to save the JSON file
        create_dirs: Whether to create parent directories if they don't exist
        indent: Indentation level for the JSON file

    Returns:
        str: The path the data was written to

    Raises:
        OSError: If the file cannot be written.
    """
    # Create parent directories if they don't exist
    parent = os.path.dirname(output_path)
    if create_dirs and parent:
        os.makedirs(parent, exist_ok=True)

    # Convert model to dictionary if needed
    data_to_save = data
    if isinstance(data, Timetable):
        data_to_save = data.to_dict()

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(data_to_save, f, ensure_ascii=False, indent=indent)

    logger.info(f"Data saved to {output_path}")
    return output_path


def safe_filename(name: str) -> str:
    """Turn an entity name such as "2.A" or "Nováková Jana" into a file name."""
    cleaned = "".join(c if c.isalnum() or c in "-_." else "_" for c in name.strip())
    return cleaned.strip("._") or "unnamed"
