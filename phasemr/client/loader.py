"""
Loads input files into a work item store keyed by file name
"""

import os
import logging
from typing import Dict, Iterable

from phasemr.common.errors import InputUnavailable

logger = logging.getLogger(__name__)


def read_work_item(path: str) -> str:
    """Read a file line by line, terminating every line with a newline"""
    if not os.path.exists(path):
        raise InputUnavailable(path, "file not found")
    if not os.path.isfile(path):
        raise InputUnavailable(path, "not a regular file")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            return ''.join(line.rstrip('\r\n') + '\n' for line in f)
    except (OSError, UnicodeDecodeError) as e:
        raise InputUnavailable(path, str(e)) from e


def load_work_items(paths: Iterable[str]) -> Dict[str, str]:
    """
    Load files into a work item store

    Args:
        paths: Input file paths

    Returns:
        Dictionary mapping base file name to content

    Raises:
        InputUnavailable: If a file can't be read or two files share a base name
    """
    store: Dict[str, str] = {}
    origins: Dict[str, str] = {}
    for path in paths:
        name = os.path.basename(path)
        if name in store:
            raise InputUnavailable(path, f"duplicate file name, already loaded from {origins[name]}")
        store[name] = read_work_item(path)
        origins[name] = path
        logger.debug(f"Loaded {path} ({len(store[name])} chars)")
    return store
