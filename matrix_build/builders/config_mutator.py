"""
Backup, mutate and restore of the shared CMakeLists.txt
"""

import os
import re
import shutil
from pathlib import Path
from typing import Any, Optional

from ..job import LinkageType


class ConfigMutator:
    """Owns the one configuration file every job rewrites

    The first mutate() of a run copies the file to ``<file>.bak``. Each
    mutate() then starts again from that backup, so the result depends only
    on the requested linkage type. restore() moves the backup back.

    Used as a context manager the file is restored on every exit that
    unwinds the stack, including exceptions and KeyboardInterrupt.
    """

    BACKUP_SUFFIX = ".bak"

    def __init__(self, config_file: Path, library: str, logger: Any, dry_run: bool = False):
        """
        Args:
            config_file: Path to the CMakeLists.txt declaring the library
            library: Library target name in ``add_library(<library> ...)``
            logger: Logger instance
            dry_run: If True, log the mutation without touching the file
        """
        self.config_file = Path(config_file)
        self.backup_file = self.config_file.with_name(self.config_file.name + self.BACKUP_SUFFIX)
        self.library = library
        self.logger = logger
        self.dry_run = dry_run
        self._backed_up = False
        self._pattern = re.compile(
            rb"(add_library\(\s*" + re.escape(library.encode()) + rb"\s+)(STATIC|SHARED)\b")

    @property
    def has_backup(self) -> bool:
        return self.backup_file.exists()

    def __enter__(self) -> "ConfigMutator":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.restore()

    def _ensure_backup(self) -> None:
        if self.has_backup:
            # an interrupted earlier run left it; it holds the true original
            self.logger.warning(f"Reusing existing backup {self.backup_file}")
            return
        if not self.config_file.exists():
            raise FileNotFoundError(f"Build configuration not found: {self.config_file}")
        self.logger.debug(f"Backing up {self.config_file} -> {self.backup_file}")
        shutil.copy2(self.config_file, self.backup_file)

    def render(self, original: bytes, linkage: LinkageType) -> bytes:
        """Return ``original`` bytes with the library's linkage keyword set to ``linkage``"""
        mutated, count = self._pattern.subn(rb"\g<1>" + linkage.value.encode(), original, count=1)
        if count == 0:
            self.logger.warning(
                f"No add_library({self.library} STATIC|SHARED declaration in {self.config_file}")
        return mutated

    def mutate(self, linkage: LinkageType) -> None:
        """
        Rewrite the config file for ``linkage``, always starting from the backup

        Raises:
            FileNotFoundError: If the config file does not exist on first use
        """
        if self.dry_run:
            self.logger.info(f"[DRY RUN] Would set {self.library} to {linkage.value} in {self.config_file}")
            return

        if not self._backed_up:
            self._ensure_backup()
            self._backed_up = True

        self._write_atomic(self.render(self.backup_file.read_bytes(), linkage))
        self.logger.debug(f"Set {self.library} linkage to {linkage.value}")

    def _write_atomic(self, content: bytes) -> None:
        tmp = self.config_file.with_name(self.config_file.name + ".tmp")
        with open(tmp, "wb") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, self.config_file)

    def restore(self) -> bool:
        """
        Move the backup back over the config file

        Returns:
            True if a backup was restored, False if there was none
        """
        self._backed_up = False
        if not self.has_backup:
            return False
        self.logger.info(f"Restoring {self.config_file}")
        os.replace(self.backup_file, self.config_file)
        return True


__all__ = ["ConfigMutator"]
