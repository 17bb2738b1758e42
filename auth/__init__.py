from flask import Blueprint

# Create blueprint
auth_bp = Blueprint('auth', __name__)

# Import routes after the blueprint is created to avoid circular imports
from . import routes  # noqa
