"""
Utilities for handling file paths and locators.
"""

import os
from pathlib import Path
from urllib.parse import urljoin, urlparse


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


def is_within(path: Path, root: Path) -> bool:
    """Checks whether ``path`` resolves to a location inside ``root``."""
    resolved_root = root.resolve()
    resolved = path.resolve()
    return resolved == resolved_root or resolved_root in resolved.parents


def relative_posix(path: Path, root: Path) -> str:
    """Returns ``path`` relative to ``root`` with forward slashes."""
    return path.relative_to(root).as_posix()


def default_app_data_dir() -> Path:
    """Returns the per-user directory holding configuration, drafts and games."""
    if override := os.getenv("AGP_LOCAL_HOME"):
        return Path(override).expanduser()
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "agp-ide"


def resolve_locator(locator: str, base_url: str) -> str:
    """
    Resolves a package locator against the server URL. Absolute URLs are
    returned unchanged.
    """
    if urlparse(locator).scheme in ("http", "https"):
        return locator
    return urljoin(base_url.rstrip("/") + "/", locator.lstrip("/"))
