import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()

class Config:
    # App settings
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-key-change-in-production')

    # Supabase
    SUPABASE_URL = os.getenv('SUPABASE_URL')
    SUPABASE_ANON_KEY = os.getenv('SUPABASE_ANON_KEY')
    SUPABASE_SERVICE_ROLE_KEY = os.getenv('SUPABASE_SERVICE_ROLE_KEY')

    # Access tokens are issued by Supabase Auth and signed with the project JWT secret
    JWT_SECRET_KEY = os.getenv('SUPABASE_JWT_SECRET', 'jwt-secret-change-in-production')
    JWT_DECODE_AUDIENCE = 'authenticated'
    JWT_ENCODE_AUDIENCE = 'authenticated'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=1)

    # Password reset links grant a session that is only trusted this long
    RECOVERY_GRANT_MAX_AGE = timedelta(minutes=15)

    # Session
    SESSION_TYPE = 'filesystem'
    SESSION_PERMANENT = False
    SESSION_COOKIE_SECURE = False  # Set to True in production with HTTPS
    SESSION_COOKIE_HTTPONLY = True

class DevelopmentConfig(Config):
    DEBUG = True

class TestingConfig(Config):
    TESTING = True
    SUPABASE_URL = 'http://localhost:54321'
    SUPABASE_ANON_KEY = 'test-anon-key'
    SUPABASE_SERVICE_ROLE_KEY = 'test-service-role-key'
    JWT_SECRET_KEY = 'test-jwt-secret-with-enough-length-for-hs256'

class ProductionConfig(Config):
    SESSION_COOKIE_SECURE = True

# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
