# lidera/config.py
"""
Centralized Configuration Management

Version: 1.0.0
Features:
- Support both local (.env) and Streamlit Cloud (secrets.toml)
- Singleton pattern for efficiency
- Type-safe getters with defaults
- DATABASE_URL override (SQLite for local runs and tests)
"""

import os
import logging
from pathlib import Path
from dotenv import load_dotenv
from typing import Dict, Any, Optional
from dataclasses import dataclass
from urllib.parse import quote_plus

# Initialize logger
logger = logging.getLogger(__name__)


def is_running_on_streamlit_cloud() -> bool:
    """Detect if running on Streamlit Cloud"""
    try:
        import streamlit as st
        return hasattr(st, 'secrets') and len(st.secrets) > 0
    except Exception:
        return False


@dataclass
class DatabaseConfig:
    """Document store database configuration container"""
    url: Optional[str] = None
    host: str = ""
    port: int = 3306
    user: str = ""
    password: str = ""
    database: str = "lidera"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'url': self.url,
            'host': self.host,
            'port': self.port,
            'user': self.user,
            'password': self.password,
            'database': self.database
        }

    def is_configured(self) -> bool:
        return bool(self.url) or all([self.host, self.user, self.password])

    def build_url(self) -> str:
        """SQLAlchemy URL, explicit DATABASE_URL wins over the MySQL parts"""
        if self.url:
            return self.url
        password = quote_plus(str(self.password))
        return f"mysql+pymysql://{self.user}:{password}@{self.host}:{self.port}/{self.database}"


@dataclass
class AWSConfig:
    """AWS configuration container (employee photos)"""
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    region: str = "sa-east-1"
    bucket_name: str = "lidera-skills"
    app_prefix: str = "lidera"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'access_key_id': self.access_key_id,
            'secret_access_key': self.secret_access_key,
            'region': self.region,
            'bucket_name': self.bucket_name,
            'app_prefix': self.app_prefix
        }

    def is_configured(self) -> bool:
        return bool(self.access_key_id and self.secret_access_key)


class Config:
    """
    Centralized configuration management

    Usage:
        from lidera.config import config

        db_url = config.get_database_url()
        page_size = config.get_app_setting("DEFAULT_PAGE_SIZE", 20)
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self.is_cloud = is_running_on_streamlit_cloud()
        self._load_config()
        self._initialized = True

    def _load_config(self):
        """Load configuration based on environment"""
        if self.is_cloud:
            self._load_cloud_config()
        else:
            self._load_local_config()

        self._load_app_config()
        self._log_config_status()

    def _load_cloud_config(self):
        """Load configuration from Streamlit Cloud secrets"""
        import streamlit as st

        db_secrets = st.secrets.get("DB_CONFIG", {})
        self._db_config = DatabaseConfig(
            url=db_secrets.get("url"),
            host=db_secrets.get("host", ""),
            port=int(db_secrets.get("port", 3306)),
            user=db_secrets.get("user", ""),
            password=db_secrets.get("password", ""),
            database=db_secrets.get("database", "lidera")
        )

        aws_secrets = st.secrets.get("AWS", {})
        self._aws_config = AWSConfig(
            access_key_id=aws_secrets.get("ACCESS_KEY_ID"),
            secret_access_key=aws_secrets.get("SECRET_ACCESS_KEY"),
            region=aws_secrets.get("REGION", "sa-east-1"),
            bucket_name=aws_secrets.get("BUCKET_NAME", "lidera-skills"),
            app_prefix=aws_secrets.get("APP_PREFIX", "lidera")
        )

        logger.info("☁️ Running in STREAMLIT CLOUD")

    def _load_local_config(self):
        """Load configuration from local .env file"""
        env_paths = [
            Path.cwd() / ".env",
            Path(__file__).parent.parent / ".env",
        ]

        for env_path in env_paths:
            if env_path.exists():
                load_dotenv(env_path)
                logger.info(f"Loaded .env from: {env_path}")
                break

        self._db_config = DatabaseConfig(
            url=os.getenv("DATABASE_URL"),
            host=os.getenv("DB_HOST", ""),
            port=int(os.getenv("DB_PORT", "3306")),
            user=os.getenv("DB_USER", ""),
            password=os.getenv("DB_PASSWORD", ""),
            database=os.getenv("DB_NAME", os.getenv("DB_DATABASE", "lidera"))
        )

        if not self._db_config.is_configured():
            logger.error("Missing required database configuration")
            raise ValueError("Missing required database configuration. Please check .env file.")

        self._aws_config = AWSConfig(
            access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
            secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
            region=os.getenv("AWS_REGION", "sa-east-1"),
            bucket_name=os.getenv("S3_BUCKET_NAME", "lidera-skills"),
            app_prefix=os.getenv("S3_APP_PREFIX", "lidera")
        )

        logger.info("💻 Running in LOCAL environment")

    def _load_app_config(self):
        """Load application-specific settings"""
        self._app_config = {
            # Session
            "SESSION_TIMEOUT_HOURS": int(os.getenv("SESSION_TIMEOUT_HOURS", "8")),

            # Lists
            "DEFAULT_PAGE_SIZE": int(os.getenv("DEFAULT_PAGE_SIZE", "20")),

            # Database pool
            "DB_POOL_SIZE": int(os.getenv("DB_POOL_SIZE", "5")),
            "DB_POOL_RECYCLE": int(os.getenv("DB_POOL_RECYCLE", "3600")),

            # Cache
            "CACHE_TTL_SECONDS": int(os.getenv("CACHE_TTL_SECONDS", "300")),

            # Feature flags
            "ENABLE_AUDIT_LOG": os.getenv("ENABLE_AUDIT_LOG", "true").lower() == "true",
            "ENABLE_PHOTO_UPLOAD": os.getenv("ENABLE_PHOTO_UPLOAD", "true").lower() == "true",
        }

    def _log_config_status(self):
        """Log configuration status"""
        db_target = self._db_config.url.split("://")[0] if self._db_config.url else \
            f"{self._db_config.host}/{self._db_config.database}"
        logger.info(f"✅ Database: {db_target}")
        logger.info(f"✅ AWS S3: {'Configured' if self._aws_config.is_configured() else 'Not configured'}")

    # ==================== PUBLIC GETTERS ====================

    def get_db_config(self) -> Dict[str, Any]:
        """Get database configuration as dictionary"""
        return self._db_config.to_dict()

    def get_database_url(self) -> str:
        """Get SQLAlchemy connection URL"""
        return self._db_config.build_url()

    def get_aws_config(self) -> Dict[str, Any]:
        """Get AWS configuration as dictionary"""
        return self._aws_config.to_dict()

    def get_app_setting(self, key: str, default: Any = None) -> Any:
        """Get application setting with default"""
        return self._app_config.get(key, default)

    def is_feature_enabled(self, feature: str) -> bool:
        """Check if feature is enabled"""
        key = f"ENABLE_{feature.upper()}"
        return self._app_config.get(key, True)

    # ==================== PROPERTIES ====================

    @property
    def app_config(self) -> Dict[str, Any]:
        return self._app_config.copy()


# ==================== SINGLETON INSTANCE ====================

config = Config()

__all__ = [
    'config',
    'Config',
    'DatabaseConfig',
    'AWSConfig',
]
