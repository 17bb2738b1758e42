"""Form actions of the account page.

Every action takes the request context and its decoded form and returns an
``Outcome``.  Actions never raise for user or backend errors; the route
layer renders whatever they return.
"""

from datetime import datetime, timezone

from flask import current_app

from account.forms import (
    DeleteAccountForm,
    EmailForm,
    EntryIdForm,
    JournalEntryForm,
    JournalEntryUpdateForm,
    PasswordForm,
    ProfileForm,
    error_fields,
)
from app.outcomes import Redirect, ServiceFailure, Success, ValidationFailure
from app.session import recovery_grant_expired
from journal.models import JOURNAL_ENTRIES_TABLE, JOURNAL_ENTRY_COLUMNS, PROFILES_TABLE

LOGIN_PATH = '/login'
CURRENT_PASSWORD_ERROR_PATH = '/login/current_password_error'
HOME_PATH = '/'

RECOVERY_EXPIRED_MESSAGE = (
    'Recovery code expired. Please log out, then use "Forgot Password" on the sign in page '
    'to reset your password. Codes are valid for 15 minutes.'
)


def _validation_failure(errors, echo):
    # The last failing rule supplies the message, every rule its fields
    return ValidationFailure(errors[-1].message, error_fields(errors), echo)


def _reauthenticate(ctx, password):
    """Check ``password`` against the session's account.

    A wrong password signs the user out on the Supabase side, so the caller
    gets a redirect that also drops the stored tokens."""
    result = ctx.gateway.sign_in_with_password(ctx.session.user.email or '', password)
    if not result.ok:
        current_app.logger.warning('Current password check failed for user %s', ctx.session.user.id)
        return Redirect(CURRENT_PASSWORD_ERROR_PATH, end_session=True)
    return None


def update_email(ctx, form: EmailForm):
    errors = form.errors()
    if errors:
        return _validation_failure(errors, {'email': form.email})

    result = ctx.gateway.update_user({'email': form.email})
    if not result.ok:
        current_app.logger.error('Error updating email: %s', result.message)
        return ServiceFailure(echo={'email': form.email})

    return Success({'email': form.email})


def update_password(ctx, form: PasswordForm):
    if ctx.session is None:
        return Redirect(LOGIN_PATH)

    # A password reset link yields a "recovery" session; a typed current
    # password takes priority so the user can use either form
    recovery = ctx.session.recovery_grant()
    is_recovery_session = recovery is not None and not form.current_password

    if is_recovery_session and recovery_grant_expired(recovery, current_app.config['RECOVERY_GRANT_MAX_AGE']):
        return ValidationFailure(
            RECOVERY_EXPIRED_MESSAGE,
            [],
            {
                'newPassword1': form.new_password1,
                'newPassword2': form.new_password2,
                'currentPassword': '',
            },
        )

    errors = form.errors(recovery_session=is_recovery_session)
    if errors:
        return _validation_failure(errors, form.echo())

    if not is_recovery_session:
        redirect = _reauthenticate(ctx, form.current_password)
        if redirect:
            return redirect

    result = ctx.gateway.update_user({'password': form.new_password1})
    if not result.ok:
        current_app.logger.error('Error updating password: %s', result.message)
        return ServiceFailure(echo=form.echo())

    return Success(form.echo())


def delete_account(ctx, form: DeleteAccountForm):
    if ctx.session is None:
        return Redirect(LOGIN_PATH)

    echo = {'currentPassword': form.current_password}
    errors = form.errors()
    if errors:
        return _validation_failure(errors, echo)

    redirect = _reauthenticate(ctx, form.current_password)
    if redirect:
        return redirect

    result = ctx.service_gateway().delete_user(ctx.session.user.id, soft_delete=True)
    if not result.ok:
        current_app.logger.error('Error deleting user account: %s', result.message)
        return ServiceFailure(echo=echo)

    ctx.gateway.sign_out()
    return Redirect(HOME_PATH, end_session=True)


def update_profile(ctx, form: ProfileForm):
    errors = form.errors()
    if errors:
        return _validation_failure(errors, form.echo())

    result = ctx.gateway.upsert(PROFILES_TABLE, {
        'id': ctx.session.user.id if ctx.session else None,
        'full_name': form.full_name,
        'company_name': form.company_name,
        'website': form.website,
        'updated_at': datetime.now(timezone.utc).isoformat(),
    })
    if not result.ok:
        current_app.logger.error('Error updating profile: %s', result.message)
        return ServiceFailure(echo=form.echo())

    return Success(form.echo())


def signout(ctx, form=None):
    if ctx.session is None:
        return Success()
    ctx.gateway.sign_out()
    return Redirect(HOME_PATH, end_session=True)


def create_journal_entry(ctx, form: JournalEntryForm):
    if ctx.session is None:
        return ValidationFailure('Not authenticated', include_fields=False)

    errors = form.errors()
    if errors:
        return ValidationFailure(errors[0].message, include_fields=False)

    row = form.to_row()
    row['user_id'] = ctx.session.user.id
    result = ctx.gateway.insert(JOURNAL_ENTRIES_TABLE, [row])
    if not result.ok:
        current_app.logger.error('Error creating journal entry: %s', result.message)
        return ServiceFailure('Could not create journal entry')

    return Success()


def update_journal_entry(ctx, form: JournalEntryUpdateForm):
    if ctx.session is None:
        return ValidationFailure('Not authenticated', include_fields=False)

    error = form.first_error()
    if error:
        return ValidationFailure(error.message, include_fields=False)

    # Filtering on the owner keeps users from touching each other's entries
    result = ctx.gateway.update(
        JOURNAL_ENTRIES_TABLE,
        form.to_row(),
        {'id': form.id, 'user_id': ctx.session.user.id},
    )
    if not result.ok:
        current_app.logger.error('Error updating journal entry %s: %s', form.id, result.message)
        return ServiceFailure('Failed to update journal entry.')

    return Success({'message': 'Journal entry updated successfully.'})


def delete_journal_entry(ctx, form: EntryIdForm):
    if ctx.session is None:
        return ValidationFailure('Not authenticated', include_fields=False)

    result = ctx.gateway.delete(
        JOURNAL_ENTRIES_TABLE,
        {'id': form.id, 'user_id': ctx.session.user.id},
    )
    if not result.ok:
        current_app.logger.error('Error deleting journal entry %s: %s', form.id, result.message)
        return ServiceFailure('Failed to delete journal entry.')

    return Success({'message': 'Journal entry deleted successfully.'})


def get_journal_entries(ctx, form=None):
    # Ask Supabase for the user instead of trusting the stored session
    user = ctx.gateway.get_user()
    if not user.ok or user.data is None:
        return ValidationFailure('Not authenticated', include_fields=False)

    result = ctx.gateway.select(
        JOURNAL_ENTRIES_TABLE,
        ', '.join(JOURNAL_ENTRY_COLUMNS),
        filters={'user_id': user.data['id']},
        order='entry_date',
        descending=True,
    )
    if not result.ok:
        current_app.logger.error('Error listing journal entries: %s', result.message)
        return ServiceFailure('Could not get journal entries', details=result.message)

    return Success({'journalEntries': result.data})


# Action name -> (handler, form schema)
ACTIONS = {
    'updateEmail': (update_email, EmailForm),
    'updatePassword': (update_password, PasswordForm),
    'deleteAccount': (delete_account, DeleteAccountForm),
    'updateProfile': (update_profile, ProfileForm),
    'signout': (signout, None),
    'createJournalEntry': (create_journal_entry, JournalEntryForm),
    'updateJournalEntry': (update_journal_entry, JournalEntryUpdateForm),
    'deleteJournalEntry': (delete_journal_entry, EntryIdForm),
    'getJournalEntries': (get_journal_entries, None),
}
