"""
Persists installation records for packages unpacked below the games root.
"""

from pathlib import Path

from agp_local.models.game import InstallationRecord

from .record_store import RecordStore

INSTALL_DIR_TEMPLATE = "Game_{package_id}"
RECORD_NAME_TEMPLATE = "Game_{key}_install"


class InstallationRepository:
    """Keeps at most one installation record per package id."""

    def __init__(self, games_root: Path):
        self.games_root = games_root
        self._store: RecordStore[InstallationRecord] = RecordStore(
            games_root, InstallationRecord, name_template=RECORD_NAME_TEMPLATE
        )

    def install_path_for(self, package_id: int) -> Path:
        """Returns the canonical install directory for a package. Performs no I/O."""
        return self.games_root / INSTALL_DIR_TEMPLATE.format(package_id=package_id)

    def record_path_for(self, package_id: int) -> Path:
        return self._store.path_for(str(package_id))

    def save(self, record: InstallationRecord) -> bool:
        """Saves the record, replacing any earlier record for the same package."""
        return self._store.put(str(record.package_id), record)

    def load(self, package_id: int) -> InstallationRecord | None:
        return self._store.get(str(package_id))

    def list_all(self) -> list[InstallationRecord]:
        return self._store.list_all()
