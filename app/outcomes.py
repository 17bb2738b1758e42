"""Results returned by form actions and page loads.

Every handler returns exactly one of these; :func:`render_outcome` turns it
into the HTTP response.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

from flask import jsonify, redirect, session as flask_session

from app.session import SESSION_TOKEN_KEYS

GENERIC_ERROR_MESSAGE = 'Unknown error. If this persists please contact us.'


@dataclass(frozen=True)
class Success:
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ValidationFailure:
    """Client-correctable problem, rendered with HTTP 400."""
    message: str
    fields: List[str] = field(default_factory=list)
    echo: Dict[str, Any] = field(default_factory=dict)
    # Some handlers reply with the message alone, without errorFields
    include_fields: bool = True


@dataclass(frozen=True)
class ServiceFailure:
    """Backend failure, rendered with HTTP 500."""
    message: str = GENERIC_ERROR_MESSAGE
    echo: Dict[str, Any] = field(default_factory=dict)
    details: Any = None


@dataclass(frozen=True)
class Redirect:
    location: str
    end_session: bool = False


Outcome = Union[Success, ValidationFailure, ServiceFailure, Redirect]


def end_session():
    """Forget the Supabase tokens stored for this browser."""
    for key in SESSION_TOKEN_KEYS:
        flask_session.pop(key, None)


def render_outcome(outcome: Outcome):
    if isinstance(outcome, Redirect):
        if outcome.end_session:
            end_session()
        return redirect(outcome.location, code=303)

    if isinstance(outcome, ValidationFailure):
        body = {'errorMessage': outcome.message}
        if outcome.include_fields:
            body['errorFields'] = list(outcome.fields)
        body.update(outcome.echo)
        return jsonify(body), 400

    if isinstance(outcome, ServiceFailure):
        body = {'errorMessage': outcome.message}
        if outcome.details is not None:
            body['details'] = outcome.details
        body.update(outcome.echo)
        return jsonify(body), 500

    return jsonify(outcome.payload), 200
