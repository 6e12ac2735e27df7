from __future__ import annotations

import mysql.connector
import pytest

from src.client_records.client_records.clients.input_model import parse_client_input
from src.client_records.client_records.clients.mysql_client_repository import (
    NAME_MOBILE_KEY,
    MySQLClientRepository,
    compose_search_filter,
)
from src.client_records.client_records.clients.search import SearchCriteria
from src.client_records.client_records.core.exceptions import DuplicateClientError, PersistenceError
from src.client_records.client_records.database.bootstrap import split_statements
from src.client_records.client_records.main import SCHEMA_PATH


class FakeCursor:
    def __init__(self, conn):
        self._conn = conn
        self.rowcount = 0

    def execute(self, sql, params=None):
        self._conn.executed.append((" ".join(sql.split()), params))
        if self._conn.error is not None:
            raise self._conn.error
        self.rowcount = self._conn.rowcount

    def fetchone(self):
        return self._conn.rows[0] if self._conn.rows else None

    def fetchall(self):
        return list(self._conn.rows)

    def close(self):
        pass


class FakeConnection:
    def __init__(self, *, rows=(), error=None, rowcount=0):
        self.rows = list(rows)
        self.error = error
        self.rowcount = rowcount
        self.executed = []
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=True):
        return FakeCursor(self)

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeFactory:
    def __init__(self, conn=None, error=None):
        self.conn = conn or FakeConnection()
        self.error = error

    def connect(self):
        if self.error is not None:
            raise self.error
        return self.conn


@pytest.fixture
def client(valid_payload, fixed_now):
    return parse_client_input(valid_payload).to_client(client_id="c-1", now=fixed_now)


def test_empty_criteria_compile_to_no_filter():
    assert compose_search_filter(SearchCriteria()) == ("", ())


def test_every_criterion_is_anded():
    where, params = compose_search_filter(
        SearchCriteria(name="Ann", mobile="987", gender="Female", date="2024-05-01")
    )

    assert where == (
        "WHERE LOWER(name) LIKE %s AND LOWER(mobile) LIKE %s AND gender = %s AND (dob = %s OR dot = %s)"
    )
    assert params == ("%ann%", "%987%", "Female", "2024-05-01", "2024-05-01")


def test_like_wildcards_in_input_are_escaped():
    _, params = compose_search_filter(SearchCriteria(name="50%_off\\"))

    assert params == ("%50\\%\\_off\\\\%",)


def test_duplicate_key_violation_becomes_duplicate_error(client):
    error = mysql.connector.IntegrityError(
        msg=f"Duplicate entry 'ram gopal-9990001111' for key 'clients.{NAME_MOBILE_KEY}'", errno=1062
    )
    factory = FakeFactory(FakeConnection(error=error))

    with pytest.raises(DuplicateClientError):
        MySQLClientRepository(factory).insert(client)

    assert factory.conn.rolled_back is True
    assert factory.conn.committed is False
    assert factory.conn.closed is True


def test_other_integrity_errors_become_persistence_errors(client):
    error = mysql.connector.IntegrityError(msg="Duplicate entry 'c-1' for key 'clients.uq_clients_id'", errno=1062)
    factory = FakeFactory(FakeConnection(error=error))

    with pytest.raises(PersistenceError):
        MySQLClientRepository(factory).insert(client)

    assert factory.conn.rolled_back is True


def test_unreachable_database_is_a_persistence_error():
    factory = FakeFactory(error=mysql.connector.InterfaceError(msg="Can't connect", errno=2003))

    with pytest.raises(PersistenceError):
        MySQLClientRepository(factory).list_all()


def test_insert_stores_normalized_name_key_and_commits(client):
    factory = FakeFactory()

    MySQLClientRepository(factory).insert(client)

    sql, params = factory.conn.executed[0]
    assert sql.startswith("INSERT INTO clients(")
    assert params[1:3] == ("Ram Gopal", "ram gopal")
    assert params[-1].tzinfo is None
    assert factory.conn.committed is True


def test_exists_duplicate_excludes_own_id():
    factory = FakeFactory(FakeConnection(rows=[{"hit": 1}]))

    found = MySQLClientRepository(factory).exists_duplicate(name=" Ram Gopal ", mobile=" 999 ", exclude_id="c-1")

    sql, params = factory.conn.executed[0]
    assert found is True
    assert sql == "SELECT 1 AS hit FROM clients WHERE name_key=%s AND mobile=%s AND id<>%s LIMIT 1"
    assert params == ("ram gopal", "999", "c-1")


def test_delete_reports_whether_a_row_went_away():
    assert MySQLClientRepository(FakeFactory(FakeConnection(rowcount=1))).delete_by_id("c-1") is True
    assert MySQLClientRepository(FakeFactory(FakeConnection(rowcount=0))).delete_by_id("c-1") is False


def test_search_orders_newest_first(fixed_now):
    row = {
        "id": "c-1",
        "name": "Anna",
        "email": None,
        "address": None,
        "mobile": "9876500001",
        "dob": "1990-01-01",
        "birth_time": "10:00",
        "dot": "2024-05-01",
        "problem_statement": None,
        "gender": "Female",
        "chargeable_amount": 100,
        "paid_amount": 40,
        "created_at": fixed_now.replace(tzinfo=None),
        "updated_at": fixed_now.replace(tzinfo=None),
    }
    factory = FakeFactory(FakeConnection(rows=[row]))

    result = MySQLClientRepository(factory).search(SearchCriteria(gender="Female"))

    sql, params = factory.conn.executed[0]
    assert "ORDER BY created_at DESC, client_pk DESC" in sql
    assert params == ("Female",)
    assert result[0].email == ""
    assert result[0].remaining_amount == 60
    assert result[0].created_at == fixed_now


def _clients_table_columns() -> dict[str, str]:
    statements = split_statements(SCHEMA_PATH.read_text(encoding="utf-8"))
    table = next(s for s in statements if s.startswith("CREATE TABLE IF NOT EXISTS clients"))
    columns = {}
    for line in table.splitlines()[1:]:
        parts = line.strip().rstrip(",").split(None, 1)
        if len(parts) == 2:
            columns[parts[0]] = parts[1]
    return columns


@pytest.mark.parametrize("column", ["name_key", "mobile", "gender"])
def test_exact_match_columns_use_binary_collation(column):
    # Case- or accent-insensitive collation would make 'female' match 'Female'
    # and 'jose' collide with 'josé'.
    assert "COLLATE utf8mb4_bin" in _clients_table_columns()[column]
