"""Data loading for the journal pages.

Loading happens in two stages before a journal page renders:

1. :func:`load_server_data` reads the session, the profile and the entries
   with the request's gateway.
2. :func:`load_client_data` binds a fresh gateway to that session, reads the
   session back from it, sends users without a complete profile to the
   profile form and fetches the entries again.

A missing session or an incomplete profile ends the load with a
``Redirect``.  A failed fetch raises ``BackendError``.
"""

from flask import current_app

from app.backend import BackendError
from app.outcomes import Redirect, Success
from journal.models import JOURNAL_ENTRIES_TABLE, PROFILES_TABLE, JournalEntry, Profile

LOGIN_PATH = '/login'
CREATE_PROFILE_PATH = '/account/create_profile'


def has_full_profile(profile):
    if not profile:
        return False
    return profile.is_complete()


def _fetch_entries(gateway, user_id):
    result = gateway.select(JOURNAL_ENTRIES_TABLE, '*', filters={'user_id': user_id})
    if not result.ok:
        current_app.logger.error('Error fetching journal entries: %s', result.message)
        raise BackendError('Failed to fetch journal entries.')
    return [JournalEntry.model_validate(row) for row in result.data or []]


def load_server_data(ctx):
    if ctx.session is None:
        return Redirect(LOGIN_PATH)

    profile_result = ctx.gateway.select(
        PROFILES_TABLE,
        'full_name, website, company_name',
        filters={'id': ctx.session.user.id},
        single=True,
    )
    if not profile_result.ok:
        current_app.logger.error('Error fetching profile: %s', profile_result.message)
        raise BackendError('Failed to fetch profile.')

    return Success({
        'session': ctx.session,
        'profile': Profile.model_validate(profile_result.data),
        'journalEntries': _fetch_entries(ctx.gateway, ctx.session.user.id),
    })


def load_client_data(backend, data, path):
    """Second stage; ``data`` is the payload of :func:`load_server_data`."""
    server_session = data['session']
    gateway = backend.user_gateway(server_session.access_token, server_session.refresh_token)

    session_result = gateway.get_session()
    session = session_result.data if session_result.ok else None

    profile = data['profile']
    if not has_full_profile(profile) and path != CREATE_PROFILE_PATH:
        return Redirect(CREATE_PROFILE_PATH)

    # Supersedes the server stage's entries
    user_id = session.user.id if session else None
    journal_entries = _fetch_entries(gateway, user_id)

    return Success({
        'supabase': gateway,
        'session': session,
        'profile': profile,
        'journalEntries': journal_entries,
    })


def load_journal_page(ctx, path):
    server = load_server_data(ctx)
    if not isinstance(server, Success):
        return server
    return load_client_data(ctx.backend, server.payload, path)


def page_payload(data):
    """JSON-friendly view of a loaded page, without the gateway handle."""
    session = data['session']
    return {
        'session': session.to_dict() if session else None,
        'profile': data['profile'].to_dict() if data['profile'] else None,
        'journalEntries': [entry.to_dict() for entry in data['journalEntries']],
    }
