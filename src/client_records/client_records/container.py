from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from .auth.gate import SessionGate
from .auth.policy import AccessPolicy
from .auth.session_store import InMemorySessionStore, MySQLSessionStore, SessionStore
from .clients.duplicate_guard import DuplicateGuard
from .clients.json_client_repository import JsonFileClientRepository
from .clients.mysql_client_repository import MySQLClientRepository
from .clients.repository import ClientRepository
from .clients.service import ClientService
from .core.constants import DEFAULT_CLIENTS_FILE
from .core.enums import SessionBackend, StorageBackend
from .database.connection import DBConfig, DatabaseConnection


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    clients_repo: ClientRepository
    session_store: SessionStore

    access_policy: AccessPolicy
    session_gate: SessionGate
    client_service: ClientService

    storage_backend: StorageBackend
    app_title: str = "Client Records"


def _connection(config: Mapping[str, Any]) -> DatabaseConnection:
    return DatabaseConnection.get_instance(DBConfig.from_mapping(config.get("DB_CONFIG") or {}))


def build_container(*, config: Mapping[str, Any]) -> Container:
    storage = StorageBackend(str(config.get("STORAGE_BACKEND", StorageBackend.MYSQL.value)).lower())
    sessions = SessionBackend(str(config.get("SESSION_BACKEND", SessionBackend.MEMORY.value)).lower())

    conn = None
    if storage == StorageBackend.MYSQL or sessions == SessionBackend.MYSQL:
        conn = _connection(config)

    if storage == StorageBackend.MYSQL:
        clients_repo: ClientRepository = MySQLClientRepository(conn)
    else:
        clients_repo = JsonFileClientRepository(Path(config.get("CLIENTS_FILE") or DEFAULT_CLIENTS_FILE))

    if sessions == SessionBackend.MYSQL:
        session_store: SessionStore = MySQLSessionStore(conn)
    else:
        session_store = InMemorySessionStore()

    access_policy = AccessPolicy(
        password=config.get("SYSTEM_PASSWORD") or None,
        password_hash=config.get("SYSTEM_PASSWORD_HASH") or None,
    )
    session_gate = SessionGate(access_policy)
    client_service = ClientService(clients_repo, guard=DuplicateGuard(clients_repo))

    return Container(
        conn=conn,
        clients_repo=clients_repo,
        session_store=session_store,
        access_policy=access_policy,
        session_gate=session_gate,
        client_service=client_service,
        storage_backend=storage,
        app_title=str(config.get("APP_TITLE") or "Client Records"),
    )
