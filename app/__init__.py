from flask import Flask, jsonify
from app.config import Config


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    from app.extensions import init_app as init_extensions
    init_extensions(app)

    # Register blueprints
    from auth import auth_bp
    from account import account_bp
    from journal import journal_bp

    app.register_blueprint(auth_bp, url_prefix='/login')
    app.register_blueprint(account_bp, url_prefix='/account')
    app.register_blueprint(journal_bp, url_prefix='/journal')

    from app.backend import BackendError

    @app.errorhandler(BackendError)
    def handle_backend_error(exc):
        app.logger.error('Page load failed: %s', exc)
        return jsonify({'errorMessage': str(exc)}), 500

    # Simple root endpoint for quick check
    @app.route('/')
    def index():
        return {'message': 'Journal account service is running', 'docs': '/api/docs/'}

    return app
