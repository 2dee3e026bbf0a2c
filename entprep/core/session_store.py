"""
Auth token persistence.

The only state that survives a restart: the backend session token, kept in
a small JSON file (``<data_dir>/session.json``) and restored on start.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from loguru import logger

TOKEN_KEY = "auth_token"


class TokenStore:
    """Reads and writes the persisted session token."""

    def __init__(self, path: Path):
        self.path = path

    def load(self) -> Optional[str]:
        """Return the stored token, or None if absent or unreadable."""
        if not self.path.exists():
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return None

        token = data.get(TOKEN_KEY) if isinstance(data, dict) else None
        return token if isinstance(token, str) and token else None

    def save(self, token: str) -> Path:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({TOKEN_KEY: token}, f, indent=2)
        return self.path

    def clear(self) -> bool:
        """Delete the session file. Returns True if one existed."""
        if self.path.exists():
            self.path.unlink()
            return True
        return False
