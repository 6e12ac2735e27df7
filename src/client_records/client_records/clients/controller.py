from __future__ import annotations

import logging

from flask import Flask, current_app, jsonify, request

from ..container import Container
from ..core.constants import DUPLICATE_CLIENT_CODE
from ..core.exceptions import DuplicateClientError, PersistenceError, ValidationError
from .search import SearchCriteria

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Client not found"


def _request_payload() -> dict:
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def _validation_error(e: ValidationError):
    body = {"success": False, "message": str(e)}
    if e.missing_fields:
        body["missingFields"] = e.missing_fields
    if e.invalid_fields:
        body["invalidFields"] = e.invalid_fields
    return jsonify(body), 400


def _duplicate_error(e: DuplicateClientError):
    return jsonify({"success": False, "code": DUPLICATE_CLIENT_CODE, "message": str(e)}), 409


def _not_found():
    return jsonify({"success": False, "message": NOT_FOUND_MESSAGE}), 404


def _server_error(message: str, e: Exception):
    logger.exception(message)
    body = {"success": False, "message": message}
    if current_app.config.get("DEBUG"):
        body["error"] = str(e)
    return jsonify(body), 500


def register(app: Flask, container: Container) -> None:
    gate = container.session_gate
    service = container.client_service

    @app.route("/api/clients", methods=["GET"], endpoint="api_clients_list")
    @gate.login_required
    def list_clients():
        try:
            clients = service.list()
        except PersistenceError as e:
            return _server_error("Failed to fetch clients", e)
        return jsonify({"success": True, "data": [c.to_dict() for c in clients]})

    @app.route("/api/clients/search", methods=["GET"], endpoint="api_clients_search")
    @gate.login_required
    def search_clients():
        try:
            clients = service.search(SearchCriteria.from_args(request.args))
        except PersistenceError as e:
            return _server_error("Failed to search clients", e)
        return jsonify({"success": True, "data": [c.to_dict() for c in clients]})

    @app.route("/api/clients/<client_id>", methods=["GET"], endpoint="api_clients_get")
    @gate.login_required
    def get_client(client_id: str):
        try:
            client = service.get(client_id)
        except PersistenceError as e:
            return _server_error("Failed to fetch client", e)
        if client is None:
            return _not_found()
        return jsonify({"success": True, "data": client.to_dict()})

    @app.route("/api/clients", methods=["POST"], endpoint="api_clients_create")
    @gate.login_required
    def create_client():
        try:
            client = service.create(_request_payload())
        except ValidationError as e:
            return _validation_error(e)
        except DuplicateClientError as e:
            return _duplicate_error(e)
        except PersistenceError as e:
            return _server_error("Failed to create client", e)
        return jsonify({"success": True, "data": client.to_dict(), "message": "Client added successfully"}), 201

    @app.route("/api/clients/<client_id>", methods=["PUT"], endpoint="api_clients_update")
    @gate.login_required
    def update_client(client_id: str):
        try:
            client = service.update(client_id, _request_payload())
        except ValidationError as e:
            return _validation_error(e)
        except DuplicateClientError as e:
            return _duplicate_error(e)
        except PersistenceError as e:
            return _server_error("Failed to update client", e)
        if client is None:
            return _not_found()
        return jsonify({"success": True, "data": client.to_dict(), "message": "Client updated successfully"})

    @app.route("/api/clients/<client_id>", methods=["DELETE"], endpoint="api_clients_delete")
    @gate.login_required
    def delete_client(client_id: str):
        try:
            removed = service.remove(client_id)
        except PersistenceError as e:
            return _server_error("Failed to delete client", e)
        if not removed:
            return _not_found()
        return jsonify({"success": True, "message": "Client deleted successfully"})
