from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_data_dir
from pydantic import ValidationError

from .models import SessionData

logger = logging.getLogger(__name__)


@dataclass
class AuthStore:
    """Keeps the signed-in session on disk between runs, readable by the owner only."""

    app_name: str = "posdesk"
    filename: str = "session.json"
    base_dir: Path | None = None

    @property
    def path(self) -> Path:
        directory = Path(self.base_dir) if self.base_dir else Path(user_data_dir(self.app_name, "PosDesk"))
        return directory / self.filename

    def save(self, session: SessionData) -> None:
        path = self.path
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(session.model_dump_json(indent=2), encoding="utf-8")
        try:
            tmp.chmod(0o600)
        except OSError:
            logger.warning("session_file_chmod_failed", extra={"path": str(tmp)})
        os.replace(tmp, path)

    def load(self) -> SessionData | None:
        path = self.path
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        try:
            return SessionData.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError):
            logger.warning("session_file_discarded", extra={"path": str(path)})
            self.clear()
            return None

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
