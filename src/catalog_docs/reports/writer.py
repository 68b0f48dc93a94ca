"""Write rendered documents into the output folder."""
from __future__ import annotations

import logging
import shutil
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)


def prepare_output_folder(output_folder: str | Path, clean: bool = True) -> Path:
    """Create the output folder and, if requested, empty it.

    Args:
        output_folder: Destination folder
        clean: Delete every file and subdirectory already in the folder

    Returns:
        Resolved output folder path
    """
    root = Path(output_folder)
    root.mkdir(parents=True, exist_ok=True)

    if clean:
        for entry in root.iterdir():
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
        logger.debug(f"Cleaned output folder: {root}")

    return root


def write_document(output_folder: str | Path, relative_path: PurePosixPath | str, content: str) -> Path:
    """Write one document as UTF-8 (no BOM) with LF line endings.

    Parent directories are created as needed.

    Returns:
        Path of the written file
    """
    path = Path(output_folder) / Path(relative_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8", newline="\n") as f:
        f.write(content)

    logger.info(f"Wrote {path}")
    return path
