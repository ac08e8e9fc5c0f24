"""Utility module for loading the list of URLs to trace."""

import json
import logging
from pathlib import Path
from typing import List, Union

logger = logging.getLogger(__name__)


def load_urls_from_file(file_path: Union[str, Path]) -> List[str]:
    """Load URLs from a file.

    A `.json` file must contain an array of URL strings. Any other file is
    read as plain text, one URL per line. Order is kept and repeated URLs
    are dropped.

    Args:
        file_path: Path to the file containing URLs

    Returns:
        List of URLs in file order

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If a JSON file is not an array of strings
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    if file_path.suffix.lower() == ".json":
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list) or not all(isinstance(u, str) for u in data):
            raise ValueError(f"JSON file {file_path} must contain a list of URL strings")
        candidates = data
    else:
        with open(file_path, "r", encoding="utf-8") as f:
            candidates = f.read().splitlines()

    urls: List[str] = []
    for url in candidates:
        url = url.strip()
        if url and url not in urls:
            urls.append(url)

    logger.info(f"Loaded {len(urls)} URLs from {file_path}")
    return urls
