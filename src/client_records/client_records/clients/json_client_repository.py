from __future__ import annotations

import json
import logging
import os
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from ..core.exceptions import DuplicateClientError, PersistenceError
from .model import Client, ClientFields, name_key
from .repository import ClientRepository
from .search import SearchCriteria, filter_clients, newest_first

logger = logging.getLogger(__name__)


class JsonFileClientRepository(ClientRepository):
    """Flat-file store: one JSON array of client objects.

    Every mutation rewrites the whole file atomically (temp file + rename).
    Read-modify-write cycles are serialized by a lock shared by every
    repository instance on the same path, and the (name, mobile) rule is
    re-checked inside that lock.
    """

    _locks: dict[str, threading.RLock] = {}
    _locks_guard = threading.Lock()

    def __init__(self, path: str | Path):
        self._path = Path(path)
        key = str(self._path.resolve())
        with self._locks_guard:
            self._lock = self._locks.setdefault(key, threading.RLock())

    @property
    def path(self) -> Path:
        return self._path

    @property
    def _tmp_path(self) -> Path:
        return self._path.with_name(self._path.name + ".tmp")

    def _read(self) -> list[Client]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("Client file %s not found, starting empty", self._path)
            self._write([])
            return []
        except OSError as exc:
            raise PersistenceError(f"Cannot read {self._path}") from exc

        try:
            rows = json.loads(raw) if raw.strip() else []
            if not isinstance(rows, list):
                raise ValueError("top-level JSON value is not an array")
            return [Client.from_record(row) for row in rows]
        except (ValueError, KeyError, TypeError) as exc:
            raise PersistenceError(f"Corrupt client file {self._path}") from exc

    def _write(self, clients: Sequence[Client]) -> None:
        tmp = self._tmp_path
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8") as fh:
                json.dump([c.to_record() for c in clients], fh, indent=2, ensure_ascii=False)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp, self._path)
        except OSError as exc:
            try:
                tmp.unlink()
            except OSError:
                pass
            raise PersistenceError(f"Cannot write {self._path}") from exc

    @staticmethod
    def _has_duplicate(clients: Sequence[Client], *, name: str, mobile: str, exclude_id: Optional[str]) -> bool:
        key = name_key(name)
        mobile = (mobile or "").strip()
        return any(c.name_key == key and c.mobile == mobile and c.id != exclude_id for c in clients)

    def list_all(self) -> Sequence[Client]:
        with self._lock:
            return newest_first(self._read())

    def get_by_id(self, client_id: str) -> Optional[Client]:
        with self._lock:
            return next((c for c in self._read() if c.id == client_id), None)

    def insert(self, client: Client) -> Client:
        with self._lock:
            clients = self._read()
            if any(c.id == client.id for c in clients):
                raise PersistenceError(f"Client id already exists: {client.id}")
            if self._has_duplicate(clients, name=client.name, mobile=client.mobile, exclude_id=None):
                raise DuplicateClientError()
            clients.append(client)
            self._write(clients)
            return client

    def replace(self, client_id: str, fields: ClientFields, *, updated_at: datetime) -> Optional[Client]:
        with self._lock:
            clients = self._read()
            for index, current in enumerate(clients):
                if current.id == client_id:
                    break
            else:
                return None

            if self._has_duplicate(clients, name=fields.name, mobile=fields.mobile, exclude_id=client_id):
                raise DuplicateClientError()

            updated = current.with_fields(fields, updated_at=updated_at)
            clients[index] = updated
            self._write(clients)
            return updated

    def delete_by_id(self, client_id: str) -> bool:
        with self._lock:
            clients = self._read()
            remaining = [c for c in clients if c.id != client_id]
            if len(remaining) == len(clients):
                return False
            self._write(remaining)
            return True

    def exists_duplicate(self, *, name: str, mobile: str, exclude_id: Optional[str] = None) -> bool:
        with self._lock:
            return self._has_duplicate(self._read(), name=name, mobile=mobile, exclude_id=exclude_id)

    def search(self, criteria: SearchCriteria) -> Sequence[Client]:
        with self._lock:
            return filter_clients(self._read(), criteria)
