from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional, Sequence

import mysql.connector

from ..core.enums import Gender
from ..core.exceptions import DuplicateClientError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, escape_like, fetchall, fetchone, is_duplicate_key
from .model import Client, ClientFields, name_key
from .repository import ClientRepository
from .search import SearchCriteria

NAME_MOBILE_KEY = "uq_clients_name_mobile"

_COLUMNS = """
    id, name, email, address, mobile, dob, birth_time, dot, problem_statement,
    gender, chargeable_amount, paid_amount, created_at, updated_at
"""


def _to_db_time(value: datetime) -> datetime:
    # DATETIME columns hold naive UTC.
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _from_db_time(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc)


def _row_to_client(r: dict) -> Client:
    return Client(
        id=r["id"],
        name=r["name"],
        email=r.get("email") or "",
        address=r.get("address") or "",
        mobile=r["mobile"],
        dob=r["dob"],
        birth_time=r["birth_time"],
        dot=r["dot"],
        problem_statement=r.get("problem_statement") or "",
        gender=Gender(r["gender"]),
        chargeable_amount=float(r.get("chargeable_amount") or 0),
        paid_amount=float(r.get("paid_amount") or 0),
        created_at=_from_db_time(r.get("created_at")),
        updated_at=_from_db_time(r.get("updated_at")),
    )


def compose_search_filter(criteria: SearchCriteria) -> tuple[str, tuple[object, ...]]:
    """Compile search criteria into a WHERE clause and its parameters.

    Returns ("", ()) when no criterion is set.
    """
    clauses: list[str] = []
    params: list[object] = []

    if criteria.name:
        clauses.append("LOWER(name) LIKE %s")
        params.append(f"%{escape_like(criteria.name.lower())}%")
    if criteria.mobile:
        clauses.append("LOWER(mobile) LIKE %s")
        params.append(f"%{escape_like(criteria.mobile.lower())}%")
    if criteria.gender:
        clauses.append("gender = %s")
        params.append(criteria.gender)
    if criteria.date:
        clauses.append("(dob = %s OR dot = %s)")
        params.extend([criteria.date, criteria.date])

    if not clauses:
        return "", ()
    return "WHERE " + " AND ".join(clauses), tuple(params)


class MySQLClientRepository(ClientRepository):
    """Relational store. Uniqueness of (name_key, mobile) is a table constraint."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select_by_id(self, cur, client_id: str) -> Optional[Client]:
        cur.execute(f"SELECT {_COLUMNS} FROM clients WHERE id=%s", (client_id,))
        row = fetchone(cur)
        return _row_to_client(row) if row else None

    def list_all(self) -> Sequence[Client]:
        return self.search(SearchCriteria())

    def get_by_id(self, client_id: str) -> Optional[Client]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_by_id(cur, client_id)

    def insert(self, client: Client) -> Client:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO clients(
                        id, name, name_key, email, address, mobile, dob, birth_time, dot,
                        problem_statement, gender, chargeable_amount, paid_amount, created_at, updated_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        client.id,
                        client.name,
                        client.name_key,
                        client.email,
                        client.address,
                        client.mobile,
                        client.dob,
                        client.birth_time,
                        client.dot,
                        client.problem_statement,
                        client.gender.value,
                        client.chargeable_amount,
                        client.paid_amount,
                        _to_db_time(client.created_at),
                        _to_db_time(client.updated_at),
                    ),
                )
            except mysql.connector.IntegrityError as exc:
                if is_duplicate_key(exc, NAME_MOBILE_KEY):
                    raise DuplicateClientError() from exc
                raise
            return client

    def replace(self, client_id: str, fields: ClientFields, *, updated_at: datetime) -> Optional[Client]:
        with db_cursor(self._conn_factory) as (_, cur):
            if self._select_by_id(cur, client_id) is None:
                return None
            try:
                cur.execute(
                    """
                    UPDATE clients
                    SET name=%s, name_key=%s, email=%s, address=%s, mobile=%s, dob=%s, birth_time=%s,
                        dot=%s, problem_statement=%s, gender=%s, chargeable_amount=%s, paid_amount=%s,
                        updated_at=%s
                    WHERE id=%s
                    """,
                    (
                        fields.name,
                        name_key(fields.name),
                        fields.email,
                        fields.address,
                        fields.mobile,
                        fields.dob,
                        fields.birth_time,
                        fields.dot,
                        fields.problem_statement,
                        fields.gender.value,
                        fields.chargeable_amount,
                        fields.paid_amount,
                        _to_db_time(updated_at),
                        client_id,
                    ),
                )
            except mysql.connector.IntegrityError as exc:
                if is_duplicate_key(exc, NAME_MOBILE_KEY):
                    raise DuplicateClientError() from exc
                raise
            return self._select_by_id(cur, client_id)

    def delete_by_id(self, client_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM clients WHERE id=%s", (client_id,))
            return cur.rowcount > 0

    def exists_duplicate(self, *, name: str, mobile: str, exclude_id: Optional[str] = None) -> bool:
        sql = "SELECT 1 AS hit FROM clients WHERE name_key=%s AND mobile=%s"
        params: list[object] = [name_key(name), (mobile or "").strip()]
        if exclude_id:
            sql += " AND id<>%s"
            params.append(exclude_id)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " LIMIT 1", tuple(params))
            return fetchone(cur) is not None

    def search(self, criteria: SearchCriteria) -> Sequence[Client]:
        where, params = compose_search_filter(criteria)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM clients
                {where}
                ORDER BY created_at DESC, client_pk DESC
                """,
                params,
            )
            return [_row_to_client(r) for r in fetchall(cur)]
