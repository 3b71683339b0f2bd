import os
from datetime import timedelta
from dotenv import load_dotenv

# Load environment variables from .env file
BASE_DIR = os.path.abspath(os.path.dirname(__file__))
dotenv_path = os.path.join(BASE_DIR, '.env')

# Load the .env file from that specific path
load_dotenv(dotenv_path=dotenv_path)


class Config:
    """Base configuration class."""

    # Get secret key and database URL from environment variables
    SECRET_KEY = os.getenv('SECRET_KEY') or 'dev-fallback-secret-key-change-in-prod'
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL') or f"sqlite:///{os.path.join(BASE_DIR, 'basma.db')}"

    # Flask-SQLAlchemy settings
    SQLALCHEMY_ENGINE_OPTIONS = {'pool_recycle': 280}
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Session settings
    PERMANENT_SESSION_LIFETIME = timedelta(days=30)

    # Flask-Login settings
    REMEMBER_COOKIE_DURATION = timedelta(days=30)
    REMEMBER_COOKIE_HTTPONLY = True
    SESSION_PROTECTION = 'basic'

    # File storage
    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER') or os.path.join(BASE_DIR, 'uploads')
    MAX_IMAGE_BYTES = int(os.getenv('MAX_IMAGE_BYTES', 5 * 1024 * 1024))
    # Leave headroom above the image ceiling for the rest of the multipart body
    MAX_CONTENT_LENGTH = MAX_IMAGE_BYTES + 1024 * 1024
    ALLOWED_IMAGE_MIME_TYPES = {'image/jpeg', 'image/png', 'image/webp', 'image/gif'}

    # Points ledger
    POINT_TIERS = (1, 2, 3, 5, 8, 10)
    POINTS_HISTORY_LIMIT = 20

    # Meetings created within this window show up as "new" in the dashboard
    NEW_MEETING_WINDOW = timedelta(hours=48)

    # Flask-Caching
    CACHE_TYPE = os.getenv('CACHE_TYPE', 'SimpleCache')
    CACHE_DEFAULT_TIMEOUT = 300
    LEADERBOARD_CACHE_TIMEOUT = int(os.getenv('LEADERBOARD_CACHE_TIMEOUT', 300))

    # Email configuration
    MAIL_SERVER = os.getenv('MAIL_SERVER', 'smtp.googlemail.com')
    MAIL_PORT = int(os.getenv('MAIL_PORT', 587))
    MAIL_USE_TLS = os.getenv('MAIL_USE_TLS', 'true').lower() in ['true', 'on', '1']
    MAIL_USERNAME = os.getenv('MAIL_USERNAME')
    MAIL_PASSWORD = os.getenv('MAIL_PASSWORD')
    MAIL_DEFAULT_SENDER = os.getenv('MAIL_DEFAULT_SENDER', 'noreply@example.com')
    CONTACT_RECIPIENT = os.getenv('CONTACT_RECIPIENT', 'contact@example.com')
    PASSWORD_RESET_MAX_AGE = 1800
