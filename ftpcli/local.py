"""Local file system abstraction layer"""

import logging
import os
from typing import List

from .exceptions import LocalFileError
from .listing import DirectoryEntry

logger = logging.getLogger(__name__)


def _error(path: str, e: OSError) -> LocalFileError:
    reason = e.strerror or str(e)
    return LocalFileError(f"{path}: {reason}", path)


class LocalFileSystem:
    """Thin wrapper over os calls that reports failures as LocalFileError"""

    def list_directory(self, path: str) -> List[DirectoryEntry]:
        """
        List directory contents

        Args:
            path: Directory to list

        Returns:
            One DirectoryEntry per directory item, in OS order

        Raises:
            LocalFileError: If the directory cannot be read
        """
        entries = []
        try:
            with os.scandir(path) as it:
                for item in it:
                    is_dir = item.is_dir()
                    size = 0
                    if not is_dir and item.is_file():
                        try:
                            size = item.stat().st_size
                        except OSError:
                            size = 0
                    entries.append(DirectoryEntry(item.name, is_dir, size))
        except OSError as e:
            raise _error(path, e)
        return entries

    def set_current_directory(self, path: str) -> str:
        """
        Change the process working directory

        Returns:
            The new absolute working directory

        Raises:
            LocalFileError: If path does not exist or is not a directory
        """
        try:
            os.chdir(path)
        except OSError as e:
            raise _error(path, e)
        return os.getcwd()

    def create_directory(self, path: str) -> bool:
        """Create a directory. Returns False if it already exists."""
        try:
            os.mkdir(path)
        except FileExistsError:
            return False
        except OSError as e:
            raise _error(path, e)
        return True

    def remove(self, path: str):
        """Remove a file or an empty directory (never recursive)"""
        try:
            if os.path.isdir(path) and not os.path.islink(path):
                os.rmdir(path)
            else:
                os.remove(path)
        except OSError as e:
            raise _error(path, e)
        logger.debug("Removed local path %s", path)

    def rename(self, src: str, dst: str):
        try:
            os.rename(src, dst)
        except OSError as e:
            raise _error(src, e)
        logger.debug("Renamed local path %s -> %s", src, dst)
