import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Listen address for `python run.py`
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3000'))
    # Comma separated; '*' allows any origin
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    # Session setup
    SESSION_CODE_LENGTH = int(os.environ.get('SESSION_CODE_LENGTH', '6'))
    DEFAULT_TOTAL_ROUNDS = int(os.environ.get('DEFAULT_TOTAL_ROUNDS', '10'))
    MAX_TOTAL_ROUNDS = int(os.environ.get('MAX_TOTAL_ROUNDS', '50'))
    # Minimum players needed to assign police and thief
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '2'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
