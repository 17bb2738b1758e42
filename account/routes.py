from flask import abort, current_app, request
from flasgger import swag_from
from pydantic import ValidationError

from app.context import current_context
from app.outcomes import ValidationFailure, render_outcome
from .actions import ACTIONS
from . import account_bp


def _decode_failure(exc: ValidationError):
    fields = []
    for error in exc.errors():
        name = str(error['loc'][0]) if error['loc'] else ''
        if name and name not in fields:
            fields.append(name)
    return ValidationFailure('Some fields could not be read', fields)


@account_bp.route('/api/<action>', methods=['POST'])
@swag_from({
    'tags': ['Account'],
    'description': 'Run one named account or journal form action',
    'consumes': ['application/x-www-form-urlencoded'],
    'parameters': [
        {
            'name': 'action',
            'in': 'path',
            'type': 'string',
            'required': True,
            'enum': list(ACTIONS),
            'description': 'Name of the form action'
        },
        {'name': 'email', 'in': 'formData', 'type': 'string', 'description': 'updateEmail'},
        {'name': 'newPassword1', 'in': 'formData', 'type': 'string', 'description': 'updatePassword'},
        {'name': 'newPassword2', 'in': 'formData', 'type': 'string', 'description': 'updatePassword'},
        {
            'name': 'currentPassword',
            'in': 'formData',
            'type': 'string',
            'description': 'updatePassword, deleteAccount'
        },
        {'name': 'fullName', 'in': 'formData', 'type': 'string', 'description': 'updateProfile'},
        {'name': 'companyName', 'in': 'formData', 'type': 'string', 'description': 'updateProfile'},
        {'name': 'website', 'in': 'formData', 'type': 'string', 'description': 'updateProfile'},
        {
            'name': 'id',
            'in': 'formData',
            'type': 'string',
            'description': 'updateJournalEntry, deleteJournalEntry'
        },
        {'name': 'title', 'in': 'formData', 'type': 'string', 'description': 'Journal entry title'},
        {
            'name': 'tags',
            'in': 'formData',
            'type': 'array',
            'items': {'type': 'string'},
            'collectionFormat': 'multi',
            'description': 'Journal entry tags, one field per tag'
        },
        {'name': 'user_text', 'in': 'formData', 'type': 'string', 'description': 'Journal entry text'},
        {'name': 'entry_date', 'in': 'formData', 'type': 'string', 'format': 'date-time'},
        {'name': 'word_count', 'in': 'formData', 'type': 'string'},
        {'name': 'bookmark_flag', 'in': 'formData', 'type': 'string', 'enum': ['true', 'false']},
        {'name': 'time_spent', 'in': 'formData', 'type': 'string', 'example': '01:00:00'}
    ],
    'responses': {
        '200': {'description': 'Action succeeded; echoed or fetched data'},
        '303': {'description': 'Redirect to /login, /login/current_password_error or /'},
        '400': {'description': 'Invalid input', 'schema': {'$ref': '#/definitions/ActionError'}},
        '404': {'description': 'Unknown action'},
        '500': {'description': 'Backend error', 'schema': {'$ref': '#/definitions/ActionError'}}
    }
})
def run_action(action):
    """Dispatch a form submission to its named action."""
    if action not in ACTIONS:
        abort(404)
    handler, form_class = ACTIONS[action]

    form = None
    if form_class is not None:
        try:
            form = form_class.from_form(request.form)
        except ValidationError as exc:
            current_app.logger.info('Rejected %s submission: %s', action, exc)
            return render_outcome(_decode_failure(exc))

    return render_outcome(handler(current_context(), form))
