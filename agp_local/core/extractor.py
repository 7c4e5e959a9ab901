"""
Unpacks downloaded package archives into their install directory.
"""

import logging
import os
import shutil
import stat
import zipfile
from pathlib import Path

from agp_local.exceptions import ExtractionError
from agp_local.utils.path import create_dir, is_within

log = logging.getLogger(__name__)


def extract_archive(archive_path: Path, destination: Path) -> int:
    """
    Extracts a zip archive into ``destination``, overwriting existing files.

    Every member is checked to land inside ``destination`` before anything is
    written. Unix permission bits recorded in the archive are restored so that
    packaged executables stay executable; files are always left owner-writable
    so a later reinstall can replace them.

    Returns:
        The number of files written.

    Raises:
        ExtractionError: If the archive is not a valid zip, contains a member
        escaping the destination, or a file cannot be written.
    """
    if not zipfile.is_zipfile(archive_path):
        raise ExtractionError(f"'{archive_path.name}' is not a supported zip archive.")

    try:
        with zipfile.ZipFile(archive_path) as zf:
            members = zf.infolist()
            for info in members:
                if not is_within(destination / info.filename, destination):
                    raise ExtractionError(
                        f"Archive member '{info.filename}' escapes the install directory."
                    )

            written = 0
            for info in members:
                target = destination / info.filename
                if info.is_dir():
                    create_dir(target)
                    continue
                create_dir(target.parent)
                if target.is_file() or target.is_symlink():
                    target.unlink()
                with zf.open(info) as src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst)
                _restore_mode(info, target)
                written += 1
    except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError) as e:
        raise ExtractionError(f"Corrupt archive '{archive_path.name}': {e}") from e
    except OSError as e:
        raise ExtractionError(f"Could not write extracted files: {e}") from e

    log.debug(f"Extracted {written} file(s) into '{destination}'.")
    return written


def _restore_mode(info: zipfile.ZipInfo, target: Path) -> None:
    if os.name == "nt":
        return
    mode = (info.external_attr >> 16) & 0o777
    if mode:
        os.chmod(target, mode | stat.S_IWUSR)
