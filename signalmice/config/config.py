"""Configuration module for the signalmice agent."""
import os
import logging

DEFAULT_REDIS_KEY = "signalmice:00000000-0000-0000-0000-000000000000"
DEFAULT_CHECK_INTERVAL = 60


def get_env_bool(name: str, default: bool) -> bool:
    """Read a boolean flag; 'true', '1' and 'yes' are truthy."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("true", "1", "yes")


def get_env_int(name: str, default: int, minimum: int = None) -> int:
    """Read an integer, falling back to the default when unparsable or too small."""
    value = os.getenv(name)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    if minimum is not None and parsed < minimum:
        return default
    return parsed


class Config:
    """Base configuration class."""

    # Redis settings
    REDIS_HOST = os.getenv('REDIS_HOST', 'localhost')
    REDIS_PORT = get_env_int('REDIS_PORT', 6379)
    REDIS_PASSWORD = os.getenv('REDIS_PASSWORD', '')
    REDIS_DB = get_env_int('REDIS_DB', 0, minimum=0)

    # Watcher settings
    REDIS_KEY = os.getenv('SIGNALMICE_KEY', DEFAULT_REDIS_KEY)
    CHECK_INTERVAL = get_env_int('SIGNALMICE_CHECK_INTERVAL', DEFAULT_CHECK_INTERVAL, minimum=1)
    COMMAND_TIMEOUT = get_env_int('SIGNALMICE_COMMAND_TIMEOUT', 30, minimum=1)

    # Host settings
    HOST_PROC_PATH = os.getenv('HOST_PROC_PATH', '/host/proc')

    # Opensearch settings
    OPENSEARCH_URL = os.getenv('OPENSEARCH_URL', 'http://localhost:9200')
    OPENSEARCH_USERNAME = os.getenv('OPENSEARCH_USERNAME', '')
    OPENSEARCH_PASSWORD = os.getenv('OPENSEARCH_PASSWORD', '')
    OPENSEARCH_INDEX = os.getenv('OPENSEARCH_INDEX', 'signalmice-logs')
    OPENSEARCH_USE_DAILY_INDEX = get_env_bool('OPENSEARCH_USE_DAILY_INDEX', True)
    OPENSEARCH_VERIFY_TLS = get_env_bool('OPENSEARCH_VERIFY_TLS', False)
    AUDIT_QUEUE_SIZE = get_env_int('AUDIT_QUEUE_SIZE', 1000, minimum=1)

    # Logging settings
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

    # Status API settings
    STATUS_API_ENABLED = get_env_bool('STATUS_API_ENABLED', False)
    HOST = os.getenv('HOST', '0.0.0.0')
    PORT = get_env_int('PORT', 8080)

    # API settings
    SERVICE_NAME = 'signalmice'
    API_TITLE = 'signalmice'
    API_VERSION = '1.0.0'
    API_DESCRIPTION = 'Status API for the signalmice host shutdown agent'

    @classmethod
    def redis_addr(cls) -> str:
        """Return the Redis address in host:port form."""
        return f"{cls.REDIS_HOST}:{cls.REDIS_PORT}"

    @classmethod
    def init_logging(cls):
        """Initialize logging configuration."""
        log_level = getattr(logging, cls.LOG_LEVEL, logging.INFO)
        logging.basicConfig(
            level=log_level,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )


class DevelopmentConfig(Config):
    """Development configuration."""
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG').upper()


class ProductionConfig(Config):
    """Production configuration."""


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    CHECK_INTERVAL = 1
    COMMAND_TIMEOUT = 1


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': ProductionConfig
}


def get_config():
    """Get configuration based on environment."""
    env = os.getenv('SIGNALMICE_ENV', 'default')
    return config.get(env, config['default'])
