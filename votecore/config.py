"""Configuration loaded from the environment (and .env files)."""

import os

from dotenv import load_dotenv

from votecore.addresses import DEFAULT_ADDRESS_PATTERN
from votecore.state import MAX_DURATION_MINUTES, MIN_DURATION_MINUTES, check_duration_bounds


class Config:
    """Base configuration with default settings.

    Values are read when the config object is created, so load the .env
    file first (``load_config`` does).
    """
    TESTING = False
    DEBUG = False

    def __init__(self):
        self.ADMIN_ADDRESS = os.getenv('VOTECORE_ADMIN_ADDRESS')
        self.ADDRESS_PATTERN = os.getenv('VOTECORE_ADDRESS_PATTERN', DEFAULT_ADDRESS_PATTERN)
        self.MIN_DURATION_MINUTES = int(os.getenv('VOTECORE_MIN_DURATION_MINUTES', MIN_DURATION_MINUTES))
        self.MAX_DURATION_MINUTES = int(os.getenv('VOTECORE_MAX_DURATION_MINUTES', MAX_DURATION_MINUTES))
        check_duration_bounds(self.MIN_DURATION_MINUTES, self.MAX_DURATION_MINUTES)
        self.EVENT_QUEUE_SIZE = int(os.getenv('VOTECORE_EVENT_QUEUE_SIZE', 0))
        self.FETCH_TIMEOUT = float(os.getenv('VOTECORE_FETCH_TIMEOUT', 30.0))
        self.LOG_LEVEL = os.getenv('VOTECORE_LOG_LEVEL', 'INFO')


class ProductionConfig(Config):
    """Production configuration settings."""

    def __init__(self):
        super().__init__()
        if not self.ADMIN_ADDRESS:
            raise RuntimeError('VOTECORE_ADMIN_ADDRESS must be set in production')


class TestingConfig(Config):
    """Testing configuration settings."""
    TESTING = True
    DEBUG = True

    def __init__(self):
        super().__init__()
        self.ADMIN_ADDRESS = os.getenv('TEST_VOTECORE_ADMIN_ADDRESS', '0x' + 'a' * 40)
        self.LOG_LEVEL = os.getenv('TEST_VOTECORE_LOG_LEVEL', 'DEBUG')


def load_config(env: str | None = None) -> Config:
    """Load the .env file for the environment and build its config.

    ``env`` defaults to the ENV variable; "testing" selects TestingConfig
    and .env.test, anything else ProductionConfig and .env.
    """
    env = env or os.getenv('ENV', 'production')
    if env == 'testing':
        load_dotenv('.env.test')
        return TestingConfig()
    load_dotenv('.env')
    return ProductionConfig()
