from __future__ import annotations

import secrets
from typing import Optional

from flask.sessions import SessionInterface, SessionMixin
from itsdangerous import BadSignature, Signer
from werkzeug.datastructures import CallbackDict

from ..common.datetime_utils import now_utc
from ..core.constants import SESSION_SIGNER_SALT
from .session_store import SessionStore


def _new_sid() -> str:
    return secrets.token_urlsafe(32)


class ServerSideSession(CallbackDict, SessionMixin):
    """Session whose data lives in a :class:`SessionStore`; the cookie holds only the id."""

    def __init__(self, initial=None, *, sid: str, new: bool = False):
        def on_update(self):
            self.modified = True
            self.accessed = True

        super().__init__(initial, on_update)
        self.sid = sid
        self.new = new
        self.modified = False
        self.accessed = False
        self.rotated_from: Optional[str] = None

    def regenerate(self) -> None:
        """Move the data to a fresh id; the old record is dropped on save."""
        if self.rotated_from is None and not self.new:
            self.rotated_from = self.sid
        self.sid = _new_sid()
        self.modified = True


class ServerSideSessionInterface(SessionInterface):
    """Flask session interface backed by a server-side store.

    The cookie value is the session id signed with ``SECRET_KEY`` so a forged
    id is rejected before the store is queried. Clearing the session deletes
    the stored record and the cookie.
    """

    def __init__(self, store: SessionStore, *, salt: str = SESSION_SIGNER_SALT):
        self._store = store
        self._salt = salt

    @property
    def store(self) -> SessionStore:
        return self._store

    def _signer(self, app) -> Optional[Signer]:
        if not app.secret_key:
            return None
        return Signer(app.secret_key, salt=self._salt, key_derivation="hmac")

    def open_session(self, app, request):
        signer = self._signer(app)
        if signer is None:
            return None

        cookie = request.cookies.get(self.get_cookie_name(app))
        if cookie:
            try:
                sid = signer.unsign(cookie).decode("utf-8")
            except BadSignature:
                sid = None
            if sid:
                data = self._store.load(sid)
                if data is not None:
                    return ServerSideSession(data, sid=sid)

        return ServerSideSession(sid=_new_sid(), new=True)

    def save_session(self, app, session, response) -> None:
        if session is None:
            # open_session raised; the error response carries no session.
            return

        name = self.get_cookie_name(app)
        domain = self.get_cookie_domain(app)
        path = self.get_cookie_path(app)
        secure = self.get_cookie_secure(app)
        samesite = self.get_cookie_samesite(app)
        httponly = self.get_cookie_httponly(app)

        if session.rotated_from:
            self._store.delete(session.rotated_from)
            session.rotated_from = None

        if not session:
            if session.modified:
                self._store.delete(session.sid)
                response.delete_cookie(
                    name, domain=domain, path=path, secure=secure, samesite=samesite, httponly=httponly
                )
            return

        if session.accessed:
            response.vary.add("Cookie")

        if not self.should_set_cookie(app, session):
            return

        expires = self.get_expiration_time(app, session)
        self._store.save(session.sid, dict(session), expires_at=expires or now_utc() + app.permanent_session_lifetime)

        value = self._signer(app).sign(session.sid.encode("utf-8")).decode("utf-8")
        response.set_cookie(
            name,
            value,
            expires=expires,
            httponly=httponly,
            domain=domain,
            path=path,
            secure=secure,
            samesite=samesite,
        )
