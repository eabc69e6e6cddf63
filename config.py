"""
PDF Analyzer Configuration
Supports AWS Parameter Store for production secrets
"""
import logging
import os
import tempfile

import boto3

logger = logging.getLogger(__name__)


def get_parameter(name: str, default: str = "") -> str:
    """Get parameter from environment or AWS Parameter Store"""
    # Environment variable takes precedence
    env_key = name.upper().replace("-", "_").replace("/", "_")
    if env_key in os.environ:
        return os.environ[env_key]

    if os.environ.get("USE_PARAMETER_STORE"):
        try:
            ssm = boto3.client("ssm", region_name=os.environ.get("AWS_REGION", "us-west-2"))
            path = os.environ.get("PARAMETER_STORE_PATH", "/pdf-analyzer/prod/")
            response = ssm.get_parameter(Name=f"{path}{name}", WithDecryption=True)
            return response["Parameter"]["Value"]
        except Exception as e:
            logger.warning("Could not load %s from Parameter Store: %s", name, e)

    return default


class Config:
    """Base configuration"""
    # Flask
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-change-in-production")

    # Uploads
    UPLOAD_FOLDER = os.environ.get("UPLOAD_FOLDER", "uploads")
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024  # 10MB
    DEFAULT_SKIP_FIRST_PAGES = int(os.environ.get("DEFAULT_SKIP_FIRST_PAGES", "1"))
    DEFAULT_SKIP_LAST_PAGES = int(os.environ.get("DEFAULT_SKIP_LAST_PAGES", "0"))

    # OpenAI-compatible analysis service
    OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY", "")
    OPENAI_MODEL = os.environ.get("OPENAI_MODEL", "gpt-4.1")
    OPENAI_BASE_URL = os.environ.get("OPENAI_BASE_URL") or None
    OPENAI_TIMEOUT_SECONDS = float(os.environ.get("OPENAI_TIMEOUT_SECONDS", "120"))
    ANALYSIS_MAX_CHARS = int(os.environ.get("ANALYSIS_MAX_CHARS", "120000"))

    # Logging
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # App Version
    APP_VERSION = os.environ.get("APP_VERSION", "2026.10")
    BUILD_TIME = os.environ.get("BUILD_TIME", "")
    GIT_COMMIT = os.environ.get("GIT_COMMIT", "")


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG")


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False

    # Override with Parameter Store in production
    SECRET_KEY = get_parameter("secret-key", Config.SECRET_KEY)
    OPENAI_API_KEY = get_parameter("openai-api-key", Config.OPENAI_API_KEY)


class TestingConfig(Config):
    """Testing configuration"""
    DEBUG = True
    TESTING = True
    UPLOAD_FOLDER = os.path.join(tempfile.gettempdir(), "pdf_analyzer_test_uploads")
    OPENAI_API_KEY = ""


config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}
