from __future__ import annotations

import logging
from typing import Optional

from ..core.exceptions import DuplicateClientError
from .repository import ClientRepository

logger = logging.getLogger(__name__)


class DuplicateGuard:
    """Rejects a write when another client has the same name and mobile.

    Name is compared case-insensitively and exactly (not as a substring);
    mobile by string equality after trimming. Both must match.
    """

    def __init__(self, clients: ClientRepository):
        self._clients = clients

    def is_duplicate(self, name: str, mobile: str, exclude_id: Optional[str] = None) -> bool:
        return self._clients.exists_duplicate(name=name, mobile=(mobile or "").strip(), exclude_id=exclude_id)

    def ensure_unique(self, name: str, mobile: str, exclude_id: Optional[str] = None) -> None:
        if self.is_duplicate(name, mobile, exclude_id):
            logger.info("Duplicate client rejected (exclude_id=%s)", exclude_id)
            raise DuplicateClientError()
