"""Supabase access for the account and journal handlers.

Handlers never touch the ``supabase`` client directly.  They go through a
:class:`SupabaseGateway`, which exposes the handful of auth and table calls the
app needs and turns every response into a :class:`BackendResult`:

* ``Ok(data)`` when the call succeeded (``data`` may be ``None``),
* ``Err(message)`` when Supabase reported an error.

The gateway never raises for backend failures, so callers decide per handler
whether an error becomes a 500 payload, a redirect or an exception.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from flask import current_app
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt import PyJWTError
from supabase import AuthError, PostgrestAPIError, create_client
from supabase.client import ClientOptions

from app.session import Session


@dataclass(frozen=True)
class Ok:
    data: Any = None

    ok = True


@dataclass(frozen=True)
class Err:
    message: str

    ok = False


BackendResult = Union[Ok, Err]


class BackendError(RuntimeError):
    """Raised by page loads when a fetch they depend on fails."""


class SupabaseGateway:
    """Narrow wrapper around one ``supabase.Client``."""

    def __init__(self, client):
        self.client = client

    # -- auth -------------------------------------------------------------

    def get_session(self) -> BackendResult:
        try:
            sb_session = self.client.auth.get_session()
        except AuthError as exc:
            return Err(exc.message)
        if sb_session is None:
            return Ok(None)
        return _session_result(sb_session)

    def get_user(self) -> BackendResult:
        try:
            response = self.client.auth.get_user()
        except AuthError as exc:
            return Err(exc.message)
        if response is None or response.user is None:
            return Ok(None)
        return Ok({'id': response.user.id, 'email': response.user.email})

    def update_user(self, attributes: Dict[str, str]) -> BackendResult:
        try:
            response = self.client.auth.update_user(attributes)
        except AuthError as exc:
            return Err(exc.message)
        return Ok(response.user.id if response.user else None)

    def sign_in_with_password(self, email: str, password: str) -> BackendResult:
        try:
            response = self.client.auth.sign_in_with_password({'email': email, 'password': password})
        except AuthError as exc:
            return Err(exc.message)
        if response.session is None:
            return Err('No session returned')
        return _session_result(response.session)

    def sign_out(self) -> BackendResult:
        try:
            self.client.auth.sign_out()
        except AuthError as exc:
            return Err(exc.message)
        return Ok()

    def delete_user(self, user_id: str, soft_delete: bool = True) -> BackendResult:
        """Requires a gateway built with the service role key."""
        try:
            self.client.auth.admin.delete_user(user_id, should_soft_delete=soft_delete)
        except AuthError as exc:
            return Err(exc.message)
        return Ok()

    # -- tables -----------------------------------------------------------

    def select(self, table: str, columns: str = '*', filters: Optional[Dict[str, Any]] = None,
               order: Optional[str] = None, descending: bool = False, single: bool = False) -> BackendResult:
        query = self.client.table(table).select(columns)
        query = _apply_filters(query, filters)
        if order:
            query = query.order(order, desc=descending)
        if single:
            query = query.single()
        return _execute(query)

    def insert(self, table: str, rows: List[Dict[str, Any]]) -> BackendResult:
        return _execute(self.client.table(table).insert(rows))

    def update(self, table: str, values: Dict[str, Any], filters: Dict[str, Any]) -> BackendResult:
        return _execute(_apply_filters(self.client.table(table).update(values), filters))

    def delete(self, table: str, filters: Dict[str, Any]) -> BackendResult:
        return _execute(_apply_filters(self.client.table(table).delete(), filters))

    def upsert(self, table: str, values: Dict[str, Any]) -> BackendResult:
        return _execute(self.client.table(table).upsert(values))


def _session_result(sb_session) -> BackendResult:
    try:
        return Ok(Session.from_access_token(sb_session.access_token, sb_session.refresh_token))
    except (PyJWTError, JWTExtendedException) as exc:
        return Err(f'Invalid access token: {exc}')


def _apply_filters(query, filters):
    for column, value in (filters or {}).items():
        query = query.eq(column, value)
    return query


def _execute(query) -> BackendResult:
    try:
        response = query.execute()
    except PostgrestAPIError as exc:
        return Err(exc.message or str(exc))
    return Ok(response.data)


class SupabaseBackend:
    """Flask extension that builds Supabase gateways for the current app."""

    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        app.extensions['backend'] = self

    def _client(self, key):
        return create_client(
            current_app.config['SUPABASE_URL'],
            key,
            options=ClientOptions(persist_session=False, auto_refresh_token=False),
        )

    def user_gateway(self, access_token: Optional[str] = None,
                     refresh_token: Optional[str] = None) -> SupabaseGateway:
        """Gateway acting as the end user, bound to their tokens when given."""
        client = self._client(current_app.config['SUPABASE_ANON_KEY'])
        if access_token and refresh_token:
            try:
                client.auth.set_session(access_token, refresh_token)
            except AuthError as exc:
                current_app.logger.info('Stored session rejected by Supabase: %s', exc.message)
        return SupabaseGateway(client)

    def service_gateway(self) -> SupabaseGateway:
        """Gateway with elevated credentials, for admin operations only."""
        return SupabaseGateway(self._client(current_app.config['SUPABASE_SERVICE_ROLE_KEY']))
