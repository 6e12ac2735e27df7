from __future__ import annotations

from datetime import timedelta

from scripts.import_clients_json import copy_clients
from src.client_records.client_records.clients.input_model import parse_client_input
from src.client_records.client_records.clients.json_client_repository import JsonFileClientRepository


def test_copy_keeps_ids_and_skips_existing(tmp_path, valid_payload, fixed_now):
    source = JsonFileClientRepository(tmp_path / "source.json")
    target = JsonFileClientRepository(tmp_path / "target.json")

    first = parse_client_input(valid_payload).to_client(client_id="c-1", now=fixed_now)
    second = parse_client_input(dict(valid_payload, name="Sita")).to_client(
        client_id="c-2", now=fixed_now + timedelta(seconds=1)
    )
    clash = parse_client_input(dict(valid_payload, name="sita")).to_client(client_id="c-9", now=fixed_now)
    for client in (first, second):
        source.insert(client)
    target.insert(clash)

    result = copy_clients(source, target)

    assert result.imported == ["c-1"]
    assert result.skipped == ["c-2"]
    assert target.get_by_id("c-1").created_at == fixed_now

    again = copy_clients(source, target)
    assert again.imported == []
    assert again.skipped == ["c-1", "c-2"]
