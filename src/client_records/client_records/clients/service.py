from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Sequence

from ..common.datetime_utils import now_utc
from .duplicate_guard import DuplicateGuard
from .input_model import parse_client_input
from .model import Client
from .repository import ClientRepository
from .search import SearchCriteria

logger = logging.getLogger(__name__)


def _new_client_id() -> str:
    return str(uuid.uuid4())


class ClientService:
    """Use case: manage client records.

    Create and update validate the whole payload, then run the duplicate
    guard, then write. Nothing is persisted when either check fails.
    """

    def __init__(
        self,
        clients: ClientRepository,
        *,
        guard: DuplicateGuard | None = None,
        clock: Callable[[], datetime] = now_utc,
        id_factory: Callable[[], str] = _new_client_id,
    ):
        self._clients = clients
        self._guard = guard or DuplicateGuard(clients)
        self._clock = clock
        self._id_factory = id_factory

    def create(self, data: Mapping[str, Any] | None) -> Client:
        fields = parse_client_input(data)
        self._guard.ensure_unique(fields.name, fields.mobile)

        client = fields.to_client(client_id=self._id_factory(), now=self._clock())
        saved = self._clients.insert(client)
        logger.info("Client created: %s", saved.id)
        return saved

    def update(self, client_id: str, data: Mapping[str, Any] | None) -> Optional[Client]:
        fields = parse_client_input(data)
        if self._clients.get_by_id(client_id) is None:
            return None
        self._guard.ensure_unique(fields.name, fields.mobile, exclude_id=client_id)

        updated = self._clients.replace(client_id, fields, updated_at=self._clock())
        if updated is None:
            return None
        logger.info("Client updated: %s", client_id)
        return updated

    def get(self, client_id: str) -> Optional[Client]:
        return self._clients.get_by_id(client_id)

    def list(self) -> Sequence[Client]:
        return self._clients.list_all()

    def remove(self, client_id: str) -> bool:
        removed = self._clients.delete_by_id(client_id)
        if removed:
            logger.info("Client deleted: %s", client_id)
        return removed

    def search(self, criteria: SearchCriteria | None = None) -> Sequence[Client]:
        criteria = criteria or SearchCriteria()
        if criteria.is_empty:
            return self._clients.list_all()
        return self._clients.search(criteria)
