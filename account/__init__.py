from flask import Blueprint

# Create blueprint
account_bp = Blueprint('account', __name__)

# Import routes after creating the blueprint to avoid circular imports
from . import routes  # noqa
