"""
Builds the function's deployment archive.
"""
import base64
import hashlib
import os
import zipfile
from dataclasses import dataclass
from typing import Iterable

from logger_config import get_logger
from utils.exceptions import PackagingError

logger = get_logger(__name__)

# Fixed entry timestamp so identical sources give an identical archive
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


@dataclass(frozen=True)
class Package:
    path: str
    source_code_hash: str


def source_code_hash(path: str) -> str:
    """Base64 encoded SHA-256 of a file, as Lambda reports CodeSha256."""
    digest = hashlib.sha256()
    with open(path, 'rb') as f:
        for chunk in iter(lambda: f.read(65536), b''):
            digest.update(chunk)
    return base64.b64encode(digest.digest()).decode('ascii')


def build_package(
    sources: Iterable[str],
    destination: str,
    base_dir: str = '.'
) -> Package:
    """
    Zip source files, keeping their paths relative to base_dir.

    Args:
        sources: Paths of the files to ship, relative to base_dir
        destination: Path of the zip file to write
        base_dir: Directory the archive root maps to

    Returns:
        Package with the archive path and its source code hash

    Raises:
        PackagingError: If a source is missing or nothing is given
    """
    sources = list(sources)
    if not sources:
        raise PackagingError('No sources to package', destination)
    for source in sources:
        if not os.path.isfile(os.path.join(base_dir, source)):
            raise PackagingError(f'Source file not found: {source}', source)

    os.makedirs(os.path.dirname(os.path.abspath(destination)), exist_ok=True)
    with zipfile.ZipFile(destination, 'w', zipfile.ZIP_DEFLATED) as archive:
        for source in sorted(sources):
            arcname = os.path.normpath(source).replace(os.sep, '/')
            info = zipfile.ZipInfo(arcname, date_time=ZIP_EPOCH)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.external_attr = 0o644 << 16
            with open(os.path.join(base_dir, source), 'rb') as f:
                archive.writestr(info, f.read())

    package = Package(destination, source_code_hash(destination))
    logger.info(f'Packaged {len(sources)} file(s) into {destination}')
    return package
