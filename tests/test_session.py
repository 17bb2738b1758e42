from datetime import datetime, timedelta, timezone

import pytest
from flask_jwt_extended import create_access_token
from jwt import InvalidAudienceError

from app.session import AuthMethod, Identity, Session, recovery_grant_expired

pytestmark = pytest.mark.unit


def test_session_from_supabase_access_token(app):
    with app.app_context():
        token = create_access_token(
            identity='user-alice',
            additional_claims={
                'email': 'alice@example.com',
                'amr': [
                    {'method': 'password', 'timestamp': 1700000000},
                    {'method': 'recovery', 'timestamp': 1700000500},
                ],
            },
        )
        session = Session.from_access_token(token, 'refresh')

    assert session.user == Identity(id='user-alice', email='alice@example.com')
    assert session.refresh_token == 'refresh'
    assert session.recovery_grant() == AuthMethod('recovery', 1700000500)


def test_token_for_another_audience_is_rejected(app):
    with app.app_context():
        token = create_access_token(identity='user-alice', additional_claims={'aud': 'anon'})
        with pytest.raises(InvalidAudienceError):
            Session.from_access_token(token, 'refresh')


def test_session_without_amr_is_not_recovery():
    session = Session('access', 'refresh', Identity('user-alice'))
    assert session.recovery_grant() is None


def test_recovery_grant_expiry_window():
    now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    window = timedelta(minutes=15)

    fresh = AuthMethod('recovery', int((now - timedelta(minutes=14)).timestamp()))
    stale = AuthMethod('recovery', int((now - timedelta(minutes=16)).timestamp()))

    assert not recovery_grant_expired(fresh, window, now=now)
    assert recovery_grant_expired(stale, window, now=now)
