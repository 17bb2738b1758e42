from flask_jwt_extended import JWTManager
from flasgger import Swagger
from flask_session import Session

from app.backend import SupabaseBackend

# Initialize extensions
jwt = JWTManager()
session = Session()
backend = SupabaseBackend()

# Configure Swagger
swagger = Swagger(
    template={
        "swagger": "2.0",
        "info": {
            "title": "Journal Account API",
            "description": "Account and journal form actions backed by Supabase",
            "version": "1.0.0"
        },
        "schemes": ["http", "https"],
        "consumes": ["application/x-www-form-urlencoded"],
        "produces": ["application/json"],
        "tags": [
            {"name": "Authentication", "description": "Session sign in"},
            {"name": "Account", "description": "Account and journal form actions"},
            {"name": "Journal", "description": "Journal page data"}
        ],
        "definitions": {
            "Profile": {
                "type": "object",
                "properties": {
                    "id": {"type": "string", "format": "uuid"},
                    "full_name": {"type": "string"},
                    "company_name": {"type": "string"},
                    "website": {"type": "string"},
                    "avatar_url": {"type": "string"},
                    "updated_at": {"type": "string", "format": "date-time"}
                }
            },
            "JournalEntry": {
                "type": "object",
                "properties": {
                    "id": {"type": "integer", "format": "int64"},
                    "user_id": {"type": "string", "format": "uuid"},
                    "title": {"type": "string"},
                    "tags": {"type": "array", "items": {"type": "string"}},
                    "user_text": {"type": "string"},
                    "ai_generated_text": {"type": "string"},
                    "ai_generated_image_url": {"type": "string"},
                    "entry_date": {"type": "string", "format": "date-time"},
                    "mood_indicator": {"type": "string"},
                    "weather": {"type": "string"},
                    "location": {"type": "string"},
                    "word_count": {"type": "integer"},
                    "privacy_level": {"type": "string"},
                    "daily_quote": {"type": "string"},
                    "entry_type": {"type": "string"},
                    "bookmark_flag": {"type": "boolean"},
                    "status": {"type": "string"},
                    "image_url": {"type": "string"},
                    "audio_url": {"type": "string"},
                    "time_spent": {"type": "string"}
                }
            },
            "ActionError": {
                "type": "object",
                "properties": {
                    "errorMessage": {"type": "string", "description": "Human readable message"},
                    "errorFields": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Form fields to highlight"
                    }
                }
            }
        }
    },
    config={
        "headers": [],
        "specs": [
            {
                "endpoint": 'apispec',
                "route": '/apispec.json',
                "rule_filter": lambda rule: True,
                "model_filter": lambda tag: True,
            }
        ],
        "static_url_path": "/flasgger_static",
        "swagger_ui": True,
        "specs_route": "/api/docs/"
    }
)

def init_app(app):
    """Initialize all extensions with the app."""
    jwt.init_app(app)
    session.init_app(app)
    backend.init_app(app)
    swagger.init_app(app)
