# sizing.py
# Predict the byte size of an archive before writing it.
#
# Mirrors what archive_tree() emits: a header per file and per empty
# directory, content padded to whole blocks, no header for directories
# that have children, and the two-block end marker.

import os
from pathlib import Path
from typing import Union

from tarstream.modules.codec.tar_header import DATA_BLOCK, EOF_BLOCK, HEADER_BLOCK


def calculate_tar_size(path: Union[str, os.PathLike]) -> int:
    """Total size of the archive archive_tree() would produce for path."""
    return _tree_size(Path(path)) + EOF_BLOCK


def _tree_size(path: Path) -> int:
    if path.is_file():
        return entry_size(path.stat().st_size)

    children = list(path.iterdir())
    if not children:
        # Empty folder header
        return HEADER_BLOCK

    size = 0
    for child in children:
        if child.is_file():
            size += entry_size(child.stat().st_size)
        elif child.is_dir():
            size += _tree_size(child)
    return size


def entry_size(file_size: int) -> int:
    """Header plus content, rounded up to a whole block."""
    size = HEADER_BLOCK + file_size
    extra = size % DATA_BLOCK
    if extra > 0:
        size += DATA_BLOCK - extra  # pad
    return size
