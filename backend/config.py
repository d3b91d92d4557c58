import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///fhevault.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Strategy storage backend: 'memory' (process lifetime) or 'sql'
    STRATEGY_STORE = os.environ.get('STRATEGY_STORE', 'memory')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
