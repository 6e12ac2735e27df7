from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Client, ClientFields
from .search import SearchCriteria


class ClientRepository(Protocol):
    """Repository interface for Client.

    Note (DIP): the service layer depends on this interface, not on a
    concrete store. Implementations raise PersistenceError for storage
    failures and DuplicateClientError when their own uniqueness check on
    (lower(name), mobile) rejects a write.
    """

    def list_all(self) -> Sequence[Client]:
        """All clients, newest first."""

        raise NotImplementedError

    def get_by_id(self, client_id: str) -> Optional[Client]:
        raise NotImplementedError

    def insert(self, client: Client) -> Client:
        raise NotImplementedError

    def replace(self, client_id: str, fields: ClientFields, *, updated_at: datetime) -> Optional[Client]:
        """Replace every editable field. Returns None if the id is unknown."""

        raise NotImplementedError

    def delete_by_id(self, client_id: str) -> bool:
        raise NotImplementedError

    def exists_duplicate(self, *, name: str, mobile: str, exclude_id: Optional[str] = None) -> bool:
        raise NotImplementedError

    def search(self, criteria: SearchCriteria) -> Sequence[Client]:
        raise NotImplementedError
