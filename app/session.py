from dataclasses import dataclass, field
from datetime import datetime, timezone, timedelta
from typing import List, Optional

from flask_jwt_extended import decode_token

# Keys under which the Supabase tokens live in the server-side Flask session
ACCESS_TOKEN_KEY = 'sb_access_token'
REFRESH_TOKEN_KEY = 'sb_refresh_token'
SESSION_TOKEN_KEYS = (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY)


@dataclass(frozen=True)
class AuthMethod:
    """One entry of the access token's ``amr`` claim."""
    method: str
    timestamp: int

    @property
    def issued_at(self):
        return datetime.fromtimestamp(self.timestamp, tz=timezone.utc)


@dataclass(frozen=True)
class Identity:
    id: str
    email: str = ''


@dataclass(frozen=True)
class Session:
    """Authenticated Supabase session borrowed for the current request."""
    access_token: str
    refresh_token: str
    user: Identity
    amr: List[AuthMethod] = field(default_factory=list)

    @classmethod
    def from_access_token(cls, access_token, refresh_token):
        """Build a session from a Supabase access token.

        The token is verified with ``JWT_SECRET_KEY`` and must carry the
        ``authenticated`` audience."""
        claims = decode_token(access_token)
        amr = [
            AuthMethod(method=entry.get('method', ''), timestamp=int(entry.get('timestamp', 0)))
            for entry in claims.get('amr') or []
        ]
        return cls(
            access_token=access_token,
            refresh_token=refresh_token,
            user=Identity(id=claims['sub'], email=claims.get('email') or ''),
            amr=amr,
        )

    def auth_method(self, method) -> Optional[AuthMethod]:
        return next((entry for entry in self.amr if entry.method == method), None)

    def recovery_grant(self) -> Optional[AuthMethod]:
        """The password-recovery entry, if this session came from a reset link."""
        return self.auth_method('recovery')

    def to_dict(self):
        return {
            'user': {'id': self.user.id, 'email': self.user.email},
            'amr': [{'method': entry.method, 'timestamp': entry.timestamp} for entry in self.amr],
        }


def recovery_grant_expired(grant: AuthMethod, max_age: timedelta, now: Optional[datetime] = None) -> bool:
    now = now or datetime.now(timezone.utc)
    return now - grant.issued_at > max_age
