import os


def _split(value):
    return [item.strip() for item in value.split(',') if item.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///memory_match.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = _split(os.environ.get(
        'CORS_ORIGINS',
        'http://localhost:5173,http://127.0.0.1:5173,http://localhost:5174,http://127.0.0.1:5174',
    ))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Length of the short code clients use to address a live session
    SESSION_CODE_LENGTH = int(os.environ.get('SESSION_CODE_LENGTH', '4'))
    # Live sessions untouched for this long are dropped when new ones are created
    SESSION_IDLE_TTL_SEC = int(os.environ.get('SESSION_IDLE_TTL_SEC', '1800'))
    # Completed sessions linger only long enough for a "play again"
    SESSION_COMPLETED_TTL_SEC = int(os.environ.get('SESSION_COMPLETED_TTL_SEC', '300'))
