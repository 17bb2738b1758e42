import copy
import time

import pytest

from app import create_app
from app.backend import Err, Ok
from app.config import TestingConfig
from app.context import RequestContext
from app.session import AuthMethod, Identity, Session


# ==================== Pytest Markers ====================
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (Flask app and routes)")


class FakeBackend:
    """In-memory stand-in for Supabase, shared by every gateway it hands out."""

    def __init__(self):
        self.tables = {'profiles': [], 'journal_entries': []}
        self.users = {}
        self.sessions = {}
        self.failing = set()
        self.deleted_users = []
        self.sign_outs = 0
        self._next_id = 1

    def add_user(self, user_id, email, password, amr=None):
        self.users[user_id] = {'email': email, 'password': password}
        return self.issue_session(user_id, amr)

    def issue_session(self, user_id, amr=None):
        token = f'access-{user_id}-{len(self.sessions)}'
        session = Session(
            access_token=token,
            refresh_token=f'refresh-{user_id}',
            user=Identity(id=user_id, email=self.users[user_id]['email']),
            amr=amr if amr is not None else [AuthMethod('password', int(time.time()))],
        )
        self.sessions[token] = session
        return session

    def add_row(self, table, row):
        row = dict(row)
        if table == 'journal_entries' and 'id' not in row:
            row['id'] = self._next_id
            self._next_id += 1
        self.tables[table].append(row)
        return row

    def rows(self, table, **filters):
        return [row for row in self.tables[table] if _matches(row, filters)]

    def user_gateway(self, access_token=None, refresh_token=None):
        return FakeGateway(self, self.sessions.get(access_token))

    def service_gateway(self):
        return FakeGateway(self, None, service=True)

    def context(self, session):
        gateway = FakeGateway(self, session)
        return RequestContext(
            backend=self,
            gateway=gateway,
            session=session,
            service_gateway=self.service_gateway,
        )


def _matches(row, filters):
    return all(str(row.get(column)) == str(value) for column, value in (filters or {}).items())


class FakeGateway:
    def __init__(self, backend, session, service=False):
        self.backend = backend
        self.session = session
        self.service = service

    def _fail(self, operation):
        return operation in self.backend.failing

    def get_session(self):
        if self._fail('get_session'):
            return Err('session lookup failed')
        return Ok(self.session)

    def get_user(self):
        if self._fail('get_user'):
            return Err('user lookup failed')
        if self.session is None:
            return Ok(None)
        return Ok({'id': self.session.user.id, 'email': self.session.user.email})

    def update_user(self, attributes):
        if self._fail('update_user'):
            return Err('update failed')
        if self.session is None:
            return Err('Auth session missing!')
        user = self.backend.users[self.session.user.id]
        user.update(attributes)
        return Ok(self.session.user.id)

    def sign_in_with_password(self, email, password):
        for user_id, user in self.backend.users.items():
            if user['email'] == email and user['password'] == password:
                self.session = self.backend.issue_session(user_id)
                return Ok(self.session)
        self.session = None
        return Err('Invalid login credentials')

    def sign_out(self):
        self.backend.sign_outs += 1
        self.session = None
        return Ok()

    def delete_user(self, user_id, soft_delete=True):
        assert self.service, 'delete_user needs the service role gateway'
        if self._fail('delete_user'):
            return Err('delete failed')
        self.backend.deleted_users.append((user_id, soft_delete))
        return Ok()

    def select(self, table, columns='*', filters=None, order=None, descending=False, single=False):
        if self._fail('select') or self._fail(f'select:{table}'):
            return Err('select failed')
        rows = [copy.deepcopy(row) for row in self.backend.rows(table, **(filters or {}))]
        if columns != '*':
            names = [name.strip() for name in columns.split(',')]
            rows = [{name: row.get(name) for name in names} for row in rows]
        if order:
            rows.sort(key=lambda row: row.get(order) or '', reverse=descending)
        if single:
            if len(rows) != 1:
                return Err('JSON object requested, multiple (or no) rows returned')
            return Ok(rows[0])
        return Ok(rows)

    def insert(self, table, rows):
        if self._fail('insert'):
            return Err('insert failed')
        return Ok([self.backend.add_row(table, row) for row in rows])

    def update(self, table, values, filters):
        if self._fail('update'):
            return Err('update failed')
        matched = self.backend.rows(table, **filters)
        for row in matched:
            row.update(values)
        return Ok(matched)

    def delete(self, table, filters):
        if self._fail('delete'):
            return Err('delete failed')
        matched = self.backend.rows(table, **filters)
        self.backend.tables[table] = [row for row in self.backend.tables[table] if row not in matched]
        return Ok(matched)

    def upsert(self, table, values):
        if self._fail('upsert'):
            return Err('upsert failed')
        existing = self.backend.rows(table, id=values['id'])
        if existing:
            existing[0].update(values)
            return Ok([existing[0]])
        return Ok([self.backend.add_row(table, values)])


@pytest.fixture()
def fake_backend():
    return FakeBackend()


@pytest.fixture()
def app(tmp_path, fake_backend):
    config_class = type('Config', (TestingConfig,), {'SESSION_FILE_DIR': str(tmp_path / 'sessions')})
    app = create_app(config_class)
    app.extensions['backend'] = fake_backend
    return app


@pytest.fixture()
def request_context(app):
    with app.test_request_context():
        yield


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def alice(fake_backend):
    return fake_backend.add_user('user-alice', 'alice@example.com', 'alice-password')


@pytest.fixture()
def bob(fake_backend):
    return fake_backend.add_user('user-bob', 'bob@example.com', 'bob-password')


@pytest.fixture()
def login(client):
    def _login(email, password):
        return client.post('/login', data={'email': email, 'password': password})
    return _login
