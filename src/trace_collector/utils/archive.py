"""Zip the collected traces into a single file."""

import asyncio
import logging
import os
import zipfile
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


def _write_zip(source_dir: Path, output_path: Path) -> int:
    count = 0
    with zipfile.ZipFile(
        output_path, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9
    ) as zf:
        for root, dirs, files in os.walk(source_dir):
            dirs.sort()
            for name in sorted(files):
                path = Path(root) / name
                if path.resolve() == output_path.resolve():
                    continue
                zf.write(path, path.relative_to(source_dir).as_posix())
                count += 1
    return count


async def archive_directory(
    source_dir: Union[str, Path], output_path: Union[str, Path]
) -> Path:
    """Write the contents of `source_dir` to a zip at `output_path`.

    Entries are stored relative to `source_dir`, so the archive root holds
    the trace files and the manifest directly.
    """
    source_dir = Path(source_dir)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    count = await asyncio.to_thread(_write_zip, source_dir, output_path)
    logger.info(
        f"Archived {count} files to {output_path}",
        extra={"source_dir": str(source_dir), "file_count": count},
    )
    return output_path
