from flask import request
from flasgger import swag_from

from app.context import current_context
from app.outcomes import Success, render_outcome
from .loaders import load_journal_page, page_payload
from . import journal_bp


@journal_bp.route('', methods=['GET'])
@journal_bp.route('/<path:subpath>', methods=['GET'])
@swag_from({
    'tags': ['Journal'],
    'description': 'Load the session, profile and journal entries for a journal page',
    'responses': {
        '200': {
            'description': 'Page data',
            'schema': {
                'type': 'object',
                'properties': {
                    'session': {'type': 'object'},
                    'profile': {'$ref': '#/definitions/Profile'},
                    'journalEntries': {
                        'type': 'array',
                        'items': {'$ref': '#/definitions/JournalEntry'}
                    }
                }
            }
        },
        '303': {'description': 'Redirect to /login or /account/create_profile'},
        '500': {'description': 'Profile or journal entries could not be fetched'}
    }
})
def journal_page(subpath=None):
    """Load data for a page under /journal."""
    outcome = load_journal_page(current_context(), request.path)
    if isinstance(outcome, Success):
        return render_outcome(Success(page_payload(outcome.payload)))
    return render_outcome(outcome)
