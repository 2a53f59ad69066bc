import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///sentquote.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or 'sentquote-dev-secret-change-in-production'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=30)
    STRIPE_SECRET_KEY = os.environ.get('STRIPE_SECRET_KEY')
    STRIPE_WEBHOOK_SECRET = os.environ.get('STRIPE_WEBHOOK_SECRET')
    PORT = int(os.environ.get('PORT', 5021))
    BASE_URL = os.environ.get('BASE_URL') or f"http://localhost:{PORT}"
    PRO_PLAN_PRICE = int(os.environ.get('PRO_PLAN_PRICE', 2900))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    JWT_SECRET_KEY = 'test-secret-key-with-enough-length-for-hs256'
    BCRYPT_LOG_ROUNDS = 4
    STRIPE_SECRET_KEY = None
    STRIPE_WEBHOOK_SECRET = None
    BASE_URL = 'http://testserver'
