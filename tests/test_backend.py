from unittest.mock import MagicMock

import pytest
from supabase import AuthApiError, PostgrestAPIError

from app.backend import Err, Ok, SupabaseGateway

pytestmark = pytest.mark.unit


@pytest.fixture()
def client():
    return MagicMock()


def test_select_builds_filtered_ordered_query(client):
    query = client.table.return_value.select.return_value
    ordered = query.eq.return_value.order.return_value
    ordered.execute.return_value.data = [{'id': 1}]

    result = SupabaseGateway(client).select(
        'journal_entries', 'id, title', filters={'user_id': 'u1'}, order='entry_date', descending=True)

    assert result == Ok([{'id': 1}])
    client.table.assert_called_once_with('journal_entries')
    client.table.return_value.select.assert_called_once_with('id, title')
    query.eq.assert_called_once_with('user_id', 'u1')
    query.eq.return_value.order.assert_called_once_with('entry_date', desc=True)


def test_single_row_select(client):
    query = client.table.return_value.select.return_value.eq.return_value
    query.single.return_value.execute.return_value.data = {'full_name': 'Alice'}

    result = SupabaseGateway(client).select('profiles', 'full_name', filters={'id': 'u1'}, single=True)

    assert result == Ok({'full_name': 'Alice'})


def test_delete_filters_on_id_and_owner(client):
    delete = client.table.return_value.delete.return_value
    delete.eq.return_value.eq.return_value.execute.return_value.data = []

    result = SupabaseGateway(client).delete('journal_entries', {'id': '7', 'user_id': 'u1'})

    assert result == Ok([])
    delete.eq.assert_called_once_with('id', '7')
    delete.eq.return_value.eq.assert_called_once_with('user_id', 'u1')


def test_postgrest_error_becomes_err(client):
    client.table.return_value.upsert.return_value.execute.side_effect = PostgrestAPIError(
        {'message': 'permission denied for table profiles', 'code': '42501'})

    result = SupabaseGateway(client).upsert('profiles', {'id': 'u1'})

    assert result == Err('permission denied for table profiles')
    assert not result.ok


def test_auth_error_becomes_err(client):
    client.auth.sign_in_with_password.side_effect = AuthApiError(
        'Invalid login credentials', 400, 'invalid_credentials')

    result = SupabaseGateway(client).sign_in_with_password('alice@example.com', 'wrong')

    assert result == Err('Invalid login credentials')
    client.auth.sign_in_with_password.assert_called_once_with(
        {'email': 'alice@example.com', 'password': 'wrong'})


def test_delete_user_is_soft_by_default(client):
    assert SupabaseGateway(client).delete_user('u1') == Ok()
    client.auth.admin.delete_user.assert_called_once_with('u1', should_soft_delete=True)


def test_get_user_without_user(client):
    client.auth.get_user.return_value = None
    assert SupabaseGateway(client).get_user() == Ok(None)


def test_missing_session(client):
    client.auth.get_session.return_value = None
    assert SupabaseGateway(client).get_session() == Ok(None)
