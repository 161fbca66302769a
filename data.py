# data.py
import json
import logging
import os
import tempfile
from typing import Dict
from pathlib import Path

from errors import AnnotationStoreCorrupt

logger = logging.getLogger(__name__)

def read_json_document(json_file: Path) -> Dict:
    """Reads a JSON object from disk.

    Args:
        json_file (Path): Path to the JSON file.

    Returns:
        Dict: The decoded document.

    Raises:
        AnnotationStoreCorrupt: if the file is missing, unreadable, not valid
            JSON, or does not hold a JSON object.
    """
    try:
        with json_file.open("r", encoding="utf-8") as file:
            data = json.load(file)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as err:
        raise AnnotationStoreCorrupt(f"{json_file}: {err}") from err
    if not isinstance(data, dict):
        raise AnnotationStoreCorrupt(f"{json_file}: expected a JSON object, got {type(data).__name__}")
    return data

def load_json_document(json_file: Path) -> Dict:
    """Loads a JSON object from disk, returning an empty dict on any failure."""
    if not json_file.exists():
        logger.info("JSON file not found: %s. Starting empty.", json_file)
        return {}
    try:
        return read_json_document(json_file)
    except AnnotationStoreCorrupt as err:
        logger.warning("Ignoring unreadable JSON file: %s. Starting empty.", err)
    return {}

def save_json_document(data: Dict, json_file: Path) -> None:
    """Replaces the JSON file with ``data`` in one step.

    The document is written to a temporary file in the same directory and
    renamed over the target, so readers never see a half-written file.

    Args:
        data (Dict): The document to save.
        json_file (Path): Path to the JSON file.

    Raises:
        OSError: if the file cannot be written.
    """
    json_file.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=str(json_file.parent), prefix=f".{json_file.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as file:
            json.dump(data, file, indent=2, ensure_ascii=False)
        os.replace(tmp_name, json_file)
    except OSError as err:
        logger.error("File system error while saving JSON data to %s: %s", json_file, err)
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise
