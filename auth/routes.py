from flask import current_app, jsonify, request
from flasgger import swag_from

from app.context import current_context, remember_session
from . import auth_bp


@auth_bp.route('', methods=['POST'])
@swag_from({
    'tags': ['Authentication'],
    'description': 'Sign in with email and password',
    'consumes': ['application/x-www-form-urlencoded'],
    'parameters': [
        {'name': 'email', 'in': 'formData', 'type': 'string', 'required': True},
        {'name': 'password', 'in': 'formData', 'type': 'string', 'required': True}
    ],
    'responses': {
        '200': {'description': 'Signed in; session stored server side'},
        '400': {'description': 'Missing email or password'},
        '401': {'description': 'Invalid credentials'}
    }
})
def login():
    """Sign in and keep the Supabase session for later requests."""
    email = request.form.get('email', '')
    password = request.form.get('password', '')

    if not email or not password:
        return jsonify({'errorMessage': 'Missing email or password', 'email': email}), 400

    result = current_context().gateway.sign_in_with_password(email, password)
    if not result.ok:
        current_app.logger.info('Sign in failed for %s: %s', email, result.message)
        return jsonify({'errorMessage': 'Invalid email or password', 'email': email}), 401

    remember_session(result.data)
    return jsonify({'message': 'Login successful', 'session': result.data.to_dict()})


@auth_bp.route('/current_password_error', methods=['GET'])
@swag_from({
    'tags': ['Authentication'],
    'description': 'Explains why the user was signed out after a wrong current password',
    'responses': {'200': {'description': 'Explanation message'}}
})
def current_password_error():
    return jsonify({
        'errorMessage': (
            'Incorrect current password. You have been signed out for security. '
            "Please sign in again, or use 'forgot password' if you don't remember it."
        )
    })
