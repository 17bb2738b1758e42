from dataclasses import dataclass
from typing import Callable, Optional

from flask import current_app, g, session as flask_session

from app.session import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, Session


@dataclass
class RequestContext:
    """Backend handles and session for one request.

    ``service_gateway`` is a factory so the elevated client is only created
    by the operations that need it."""
    backend: object
    gateway: object
    session: Optional[Session]
    service_gateway: Callable[[], object]


def build_request_context():
    """Create the context from the tokens stored in the Flask session.

    Supabase swaps an expired access token for a new pair while the gateway is
    built, and the old refresh token stops working, so the new pair is stored
    in place of the old one."""
    backend = current_app.extensions['backend']
    stored = (flask_session.get(ACCESS_TOKEN_KEY), flask_session.get(REFRESH_TOKEN_KEY))
    gateway = backend.user_gateway(*stored)
    result = gateway.get_session()
    if not result.ok:
        current_app.logger.info('Could not read session: %s', result.message)
    session = result.data if result.ok else None
    if session is not None and (session.access_token, session.refresh_token) != stored:
        remember_session(session)
    return RequestContext(
        backend=backend,
        gateway=gateway,
        session=session,
        service_gateway=backend.service_gateway,
    )


def current_context():
    if 'request_context' not in g:
        g.request_context = build_request_context()
    return g.request_context


def remember_session(session: Session):
    flask_session[ACCESS_TOKEN_KEY] = session.access_token
    flask_session[REFRESH_TOKEN_KEY] = session.refresh_token
