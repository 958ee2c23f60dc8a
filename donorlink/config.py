import os


class Config:
    """Base configuration, overridable through environment variables"""
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'mysql+pymysql://root:@localhost/donorlink')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = os.environ.get('SECRET_KEY', 'change-me')
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY', SECRET_KEY)

    # Minimum days between two donations by the same donor
    DONATION_COOLDOWN_DAYS = int(os.environ.get('DONATION_COOLDOWN_DAYS', 90))
    NEARBY_RADIUS_KM = float(os.environ.get('NEARBY_RADIUS_KM', 50))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///donorlink.db')
    LOG_LEVEL = 'DEBUG'


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SECRET_KEY = 'testing-secret'
    JWT_SECRET_KEY = 'testing-jwt-secret-with-enough-length'
    DONATION_COOLDOWN_DAYS = 90
    NEARBY_RADIUS_KM = 50.0
    BCRYPT_LOG_ROUNDS = 4


config_by_name = {
    'default': Config,
    'development': DevelopmentConfig,
    'testing': TestingConfig,
}
