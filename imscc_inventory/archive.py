"""Archive reader: turn an .imscc blob into {path: decoded text}."""
from __future__ import annotations

import asyncio
import io
import zipfile
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple

from .config import WEB_RESOURCES_PREFIX


def find_first_imscc(path: Path) -> Optional[Path]:
    if path.is_file() and path.suffix.lower() in {'.imscc', '.zip'}:
        return path
    if path.is_dir():
        for p in sorted(path.glob('*.imscc')) + sorted(path.glob('*.zip')):
            return p
    return None


def iter_package_entries(blob: bytes, excluded_prefix: str = WEB_RESOURCES_PREFIX
                         ) -> Iterator[Tuple[str, str]]:
    """Yield (name, text) for every file entry outside `excluded_prefix`, in archive order.

    Raises zipfile.BadZipFile if `blob` is not a zip archive.
    """
    with zipfile.ZipFile(io.BytesIO(blob), 'r') as z:
        for info in z.infolist():
            if info.is_dir() or info.filename.startswith(excluded_prefix):
                continue
            yield info.filename, z.read(info).decode('utf-8', errors='replace')


def read_package(blob: bytes, excluded_prefix: str = WEB_RESOURCES_PREFIX) -> Dict[str, str]:
    return dict(iter_package_entries(blob, excluded_prefix))


async def extract_imscc(blob: bytes, excluded_prefix: str = WEB_RESOURCES_PREFIX) -> Dict[str, str]:
    """Coroutine form of read_package; yields to the loop between entries."""
    contents: Dict[str, str] = {}
    for name, text in iter_package_entries(blob, excluded_prefix):
        contents[name] = text
        await asyncio.sleep(0)
    return contents
