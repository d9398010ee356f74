# config.py
import os
from datetime import timedelta


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "dev-jwt-secret-change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "mysql+pymysql://root:@localhost/fitfeed"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # JWT config
    JWT_TOKEN_LOCATION = ["headers"]
    JWT_HEADER_NAME = "Authorization"
    JWT_HEADER_TYPE = "Bearer"
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=7)

    # Days, quarters and time-of-day buckets are all computed in this offset (KST).
    REFERENCE_UTC_OFFSET_HOURS = int(os.environ.get("REFERENCE_UTC_OFFSET_HOURS", 9))

    # Popular feed
    POPULAR_WINDOW_DAYS = int(os.environ.get("POPULAR_WINDOW_DAYS", 30))
    POPULAR_OVERFETCH_FACTOR = int(os.environ.get("POPULAR_OVERFETCH_FACTOR", 3))

    DEFAULT_PAGE_SIZE = 10
    MAX_PAGE_SIZE = 50


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET_KEY = "test-jwt-secret-with-enough-length-for-hs256"
