from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

from .log import device_label
from .models import SessionArtifacts

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    def save(self, artifacts: SessionArtifacts) -> Path | str: ...


class JsonSessionStore:
    """
    Writes cookies to ``<root>/<email>/session_<desktop|mobile>.json``.

    The file holds the cookie list in the browser's own key format so it can
    be handed back to ``BrowserContext.add_cookies()`` unchanged.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def path_for(self, email: str, is_mobile: bool) -> Path:
        return self.root / email / f"session_{device_label(is_mobile)}.json"

    def save(self, artifacts: SessionArtifacts) -> Path:
        path = self.path_for(artifacts.email, artifacts.is_mobile)
        path.parent.mkdir(parents=True, exist_ok=True)
        cookies = [c.model_dump(by_alias=True) for c in artifacts.cookies]
        path.write_text(json.dumps(cookies, indent=2), encoding="utf-8")
        logger.debug(f"saved {len(cookies)} cookies to {path}")
        return path

    def load(self, email: str, is_mobile: bool) -> list[dict]:
        path = self.path_for(email, is_mobile)
        if not path.exists():
            return []
        return json.loads(path.read_text(encoding="utf-8"))
