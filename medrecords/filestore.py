"""
Flat-file storage primitives

Line-oriented reads/writes plus the timestamped backup scheme used before every save.
Backups live in <data_dir>/backup/ and are named <filename>_<YYYY-MM-DD_HH-MM-SS>.bak.
"""

import logging
import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger(__name__)

BACKUP_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
BACKUP_SUFFIX = ".bak"

PathLike = Union[str, Path]


class FileStore:
    """Line-based file access with backup/restore"""

    def __init__(self, backup_dir: PathLike):
        self.backup_dir = Path(backup_dir)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def read_lines(self, path: PathLike) -> List[str]:
        """Non-blank, non-comment lines; empty list if the file is missing"""
        return [
            line for line in self.read_all_lines(path)
            if line.strip() and not line.startswith("#")
        ]

    def read_all_lines(self, path: PathLike) -> List[str]:
        path = Path(path)
        if not path.exists():
            return []
        try:
            # Undecodable bytes become U+FFFD so one bad line cannot hide the rest
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                return [line.rstrip("\r\n") for line in f]
        except OSError as e:
            logger.error(f"Failed to read {path}: {e}")
            return []

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def write_lines(self, path: PathLike, lines: List[str], header: str = "") -> bool:
        """Replace the file contents; the header is written first when given"""
        path = Path(path)
        if not self.create_directory_if_not_exists(path.parent):
            return False

        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                if header:
                    f.write(header + "\n")
                for line in lines:
                    f.write(line + "\n")
            os.replace(tmp_name, path)
            return True
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            return False

    def append_line(self, path: PathLike, line: str) -> bool:
        path = Path(path)
        if not self.create_directory_if_not_exists(path.parent):
            return False
        try:
            with open(path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
            return True
        except OSError as e:
            logger.error(f"Failed to append to {path}: {e}")
            return False

    # ------------------------------------------------------------------
    # File management
    # ------------------------------------------------------------------

    def file_exists(self, path: PathLike) -> bool:
        return Path(path).is_file()

    def create_file_if_not_exists(self, path: PathLike, header: str = "") -> bool:
        path = Path(path)
        if path.exists():
            return True
        return self.write_lines(path, [], header)

    def create_directory_if_not_exists(self, path: PathLike) -> bool:
        try:
            Path(path).mkdir(parents=True, exist_ok=True)
            return True
        except OSError as e:
            logger.error(f"Failed to create directory {path}: {e}")
            return False

    def copy_file(self, source: PathLike, destination: PathLike) -> bool:
        try:
            Path(destination).parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, destination)
            return True
        except OSError as e:
            logger.error(f"Failed to copy {source} to {destination}: {e}")
            return False

    def delete_file(self, path: PathLike) -> bool:
        try:
            Path(path).unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Failed to delete {path}: {e}")
            return False

    # ------------------------------------------------------------------
    # Backups
    # ------------------------------------------------------------------

    def backup_name(self, path: PathLike, moment: Optional[datetime] = None) -> Path:
        moment = moment or datetime.now()
        filename = Path(path).name
        return self.backup_dir / f"{filename}_{moment.strftime(BACKUP_TIMESTAMP_FORMAT)}{BACKUP_SUFFIX}"

    def create_backup(self, path: PathLike) -> Optional[Path]:
        """
        Copy the file into the backup directory.

        Returns the backup path, or None when there was nothing to back up or the
        copy failed. Failures are logged and never propagate to the caller's save.
        """
        path = Path(path)
        if not path.is_file():
            return None
        if not self.create_directory_if_not_exists(self.backup_dir):
            return None
        target = self.backup_name(path)
        if self.copy_file(path, target):
            logger.debug(f"Backed up {path.name} to {target.name}")
            return target
        logger.warning(f"Backup of {path} failed; continuing with save")
        return None

    def list_backups(self, path: PathLike) -> List[Path]:
        prefix = Path(path).name + "_"
        if not self.backup_dir.is_dir():
            return []
        return sorted(
            entry for entry in self.backup_dir.iterdir()
            if entry.is_file() and entry.name.startswith(prefix) and entry.name.endswith(BACKUP_SUFFIX)
        )

    def restore_from_backup(self, path: PathLike) -> bool:
        """Overwrite the file with its most recent backup"""
        backups = self.list_backups(path)
        if not backups:
            logger.warning(f"No backup found for {Path(path).name}")
            return False
        # Timestamps sort lexicographically
        latest = max(backups, key=lambda entry: entry.name)
        if self.copy_file(latest, path):
            logger.info(f"Restored {Path(path).name} from {latest.name}")
            return True
        return False
