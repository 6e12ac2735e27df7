from __future__ import annotations

import hmac
from dataclasses import dataclass
from typing import Optional

from werkzeug.security import check_password_hash


@dataclass(frozen=True)
class AccessPolicy:
    """Who may open a session: anyone who knows the single system password.

    The secret is either configured in plain text or as a werkzeug password
    hash; the hash wins when both are set.
    """

    password: Optional[str] = None
    password_hash: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.password or self.password_hash)

    def verify(self, candidate: str) -> bool:
        if not candidate:
            return False

        if self.password_hash:
            try:
                return check_password_hash(self.password_hash, candidate)
            except ValueError:
                # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
                return False

        if self.password:
            return hmac.compare_digest(self.password.encode("utf-8"), candidate.encode("utf-8"))

        return False
