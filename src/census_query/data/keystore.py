"""Persistent storage for an installed Census API key."""

import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path.home() / ".census-query"
KEY_FILENAME = "installed_key"


class KeyStore:
    """
    Reads and writes an API key kept in a local file.

    Once a key is installed, queries without an explicit key use it.
    """

    def __init__(self, path: Optional[Path] = None):
        """
        Initialize key store.

        Args:
            path: Key file location. Defaults to ~/.census-query/installed_key
        """
        self.path = Path(path) if path is not None else DEFAULT_DATA_DIR / KEY_FILENAME

    def read_installed_key(self) -> Optional[str]:
        """Return the installed key, or None if no key is installed."""
        if not self.path.exists():
            return None
        key = self.path.read_text().strip()
        return key or None

    def write_installed_key(self, key: str) -> None:
        """Install a key, replacing any previous one."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(key.strip())
        logger.debug("Installed API key at %s", self.path)

    def remove_installed_key(self) -> bool:
        """
        Remove the installed key.

        Returns:
            True if a key file was removed
        """
        if self.path.exists():
            self.path.unlink()
            return True
        return False

    def __repr__(self) -> str:
        return f"KeyStore({str(self.path)!r})"
