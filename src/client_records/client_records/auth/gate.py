from __future__ import annotations

import logging
from functools import wraps
from typing import MutableMapping

from flask import jsonify, redirect, request, session, url_for

from ..core.constants import SESSION_AUTH_KEY, SESSION_EXPIRED_MESSAGE
from ..core.exceptions import AuthenticationError
from .policy import AccessPolicy

logger = logging.getLogger(__name__)


class SessionGate:
    """Two-state session gate: anonymous <-> authenticated.

    The only credential is the shared system password held by the injected
    :class:`AccessPolicy`. State lives in the (server-side) Flask session.
    """

    def __init__(self, policy: AccessPolicy, *, api_prefix: str = "/api/"):
        self._policy = policy
        self._api_prefix = api_prefix

    @property
    def policy(self) -> AccessPolicy:
        return self._policy

    @staticmethod
    def is_authenticated(sess: MutableMapping) -> bool:
        return bool(sess.get(SESSION_AUTH_KEY))

    def login(self, sess: MutableMapping, password: str) -> None:
        if not self._policy.verify(password):
            logger.info("Login rejected")
            raise AuthenticationError("Invalid password")

        sess.clear()
        if hasattr(sess, "regenerate"):
            sess.regenerate()
        sess[SESSION_AUTH_KEY] = True
        # Permanent sessions carry PERMANENT_SESSION_LIFETIME (24h) on the cookie and store.
        if hasattr(sess, "permanent"):
            sess.permanent = True
        logger.info("Login succeeded")

    def logout(self, sess: MutableMapping) -> None:
        sess.clear()
        logger.info("Logged out")

    def _is_api_request(self) -> bool:
        return request.path.startswith(self._api_prefix)

    def login_required(self, view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if self.is_authenticated(session):
                return view(*args, **kwargs)

            if self._is_api_request():
                return jsonify({"success": False, "message": SESSION_EXPIRED_MESSAGE}), 401
            return redirect(url_for("login"))

        return wrapper

    def redirect_if_authenticated(self, view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if self.is_authenticated(session):
                return redirect(url_for("dashboard"))
            return view(*args, **kwargs)

        return wrapper
