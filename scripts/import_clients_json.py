"""Copy clients from a JSON file store into the MySQL store.

Usage: python scripts/import_clients_json.py [path/to/clients.json]

Ids and timestamps are kept. Records whose (name, mobile) already exists
in the database, or whose id is already present, are skipped.
"""

from __future__ import annotations

import importlib
import sys
from dataclasses import dataclass, field
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.client_records.client_records.clients.json_client_repository import JsonFileClientRepository
from src.client_records.client_records.clients.mysql_client_repository import MySQLClientRepository
from src.client_records.client_records.clients.repository import ClientRepository
from src.client_records.client_records.core.exceptions import DuplicateClientError
from src.client_records.client_records.database.connection import DatabaseConnection, DBConfig


@dataclass
class ImportResult:
    imported: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def copy_clients(source: ClientRepository, target: ClientRepository) -> ImportResult:
    result = ImportResult()
    # Oldest first so the target's insertion order matches creation order.
    for client in reversed(list(source.list_all())):
        if target.get_by_id(client.id) is not None:
            result.skipped.append(client.id)
            continue
        try:
            target.insert(client)
        except DuplicateClientError:
            result.skipped.append(client.id)
            continue
        result.imported.append(client.id)
    return result


def main(argv: list[str]) -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())

    path = Path(argv[0]) if argv else Path(settings.CLIENTS_FILE)
    url = getattr(settings, "DATABASE_URL", "")
    db = DBConfig.from_url(url) if url else DBConfig.from_mapping(settings.DB_CONFIG)

    result = copy_clients(JsonFileClientRepository(path), MySQLClientRepository(DatabaseConnection(db)))
    print(f"OK: imported={len(result.imported)} skipped={len(result.skipped)} from {path}")


if __name__ == "__main__":
    main(sys.argv[1:])
