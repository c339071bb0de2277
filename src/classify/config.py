"""
Centralized Configuration for the classification service
Environment parsing and validation. Built once at startup by load_config()
and passed explicitly to every component.
"""

import os
import secrets
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List

from .errors import ConfigError


class StorageType(str, Enum):
    """Content store backends"""
    FILESYSTEM = "filesystem"
    S3 = "s3"
    REDIS = "redis"


class TagStorageType(str, Enum):
    """Tag index backends"""
    REDIS = "redis"


class ClassifierType(str, Enum):
    """Classifier backends"""
    CLAUDE = "claude"
    CHATGPT = "chatgpt"


def _parse_enum(enum_cls, value, env_name: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ConfigError(f"Invalid {env_name}: '{value}' (expected one of: {allowed})")


def _env_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"Invalid {name}: '{raw}' is not an integer")


def _env_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"Invalid {name}: '{raw}' is not a number")


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


@dataclass
class ApiConfig:
    """HTTP API configuration"""
    host: str = field(default_factory=lambda: os.getenv("API_HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: _env_int("API_PORT", "3000"))
    api_key: Optional[str] = field(default_factory=lambda: os.getenv("API_KEY"))
    api_key_generated: bool = False

    def __post_init__(self):
        if not self.api_key:
            self.api_key = secrets.token_urlsafe(32)
            self.api_key_generated = True
        if not 0 < self.port < 65536:
            raise ConfigError(f"Invalid API_PORT: {self.port}")

    def validate(self) -> List[str]:
        warnings = []
        if self.api_key_generated:
            warnings.append(
                f"WARNING: No API_KEY found in environment, generated random key: {self.api_key}"
            )
        return warnings


@dataclass
class StorageConfig:
    """Content store configuration"""
    storage_type: StorageType = field(default_factory=lambda: os.getenv("STORAGE_TYPE", "filesystem"))
    content_storage_path: str = field(default_factory=lambda: os.getenv(
        "CONTENT_STORAGE_PATH", "./data/content"
    ))
    s3_bucket: Optional[str] = field(default_factory=lambda: os.getenv("S3_BUCKET"))
    s3_prefix: str = field(default_factory=lambda: os.getenv("S3_PREFIX", ""))
    s3_region: Optional[str] = field(default_factory=lambda: os.getenv("S3_REGION"))
    s3_endpoint_url: Optional[str] = field(default_factory=lambda: os.getenv("S3_ENDPOINT_URL"))
    s3_profile: Optional[str] = field(default_factory=lambda: os.getenv("AWS_PROFILE"))
    s3_access_key: Optional[str] = field(default_factory=lambda: os.getenv("AWS_ACCESS_KEY_ID"))
    s3_secret_key: Optional[str] = field(default_factory=lambda: os.getenv("AWS_SECRET_ACCESS_KEY"))
    redis_prefix: str = field(default_factory=lambda: os.getenv(
        "REDIS_CONTENT_PREFIX", "classify:content:"
    ))
    timeout_seconds: float = field(default_factory=lambda: _env_float("STORAGE_TIMEOUT_SECONDS", "10"))

    def __post_init__(self):
        self.storage_type = _parse_enum(StorageType, self.storage_type, "STORAGE_TYPE")
        if self.storage_type == StorageType.S3 and not self.s3_bucket:
            raise ConfigError("S3_BUCKET must be set when STORAGE_TYPE=s3")
        if self.timeout_seconds <= 0:
            raise ConfigError("STORAGE_TIMEOUT_SECONDS must be positive")


@dataclass
class RedisConfig:
    """Redis connection pool configuration, shared by the key-value content store and the tag index"""
    url: str = field(default_factory=lambda: os.getenv("REDIS_URL", "redis://127.0.0.1:6379"))
    password: Optional[str] = field(default_factory=lambda: os.getenv("REDIS_PASSWORD"))
    max_connections: int = field(default_factory=lambda: _env_int("REDIS_MAX_CONNECTIONS", "20"))


@dataclass
class TagStorageConfig:
    """Tag index configuration"""
    tag_storage_type: TagStorageType = field(default_factory=lambda: os.getenv("TAG_STORAGE_TYPE", "redis"))

    def __post_init__(self):
        self.tag_storage_type = _parse_enum(TagStorageType, self.tag_storage_type, "TAG_STORAGE_TYPE")


@dataclass
class ClassifierConfig:
    """Classifier configuration"""
    classifier_type: ClassifierType = field(default_factory=lambda: os.getenv("CLASSIFIER_TYPE", "claude"))
    anthropic_api_key: Optional[str] = field(default_factory=lambda: os.getenv("ANTHROPIC_API_KEY"))
    anthropic_model: str = field(default_factory=lambda: os.getenv(
        "ANTHROPIC_MODEL", "claude-3-haiku-20240307"
    ))
    openai_api_key: Optional[str] = field(default_factory=lambda: os.getenv("OPENAI_API_KEY"))
    openai_model: str = field(default_factory=lambda: os.getenv("OPENAI_MODEL", "gpt-4o-mini"))
    max_prompt_length: int = field(default_factory=lambda: _env_int("MAX_PROMPT_LENGTH", "200000"))
    timeout_seconds: float = field(default_factory=lambda: _env_float("CLASSIFIER_TIMEOUT_SECONDS", "60"))
    url_fetch_timeout_seconds: float = field(default_factory=lambda: _env_float(
        "URL_FETCH_TIMEOUT_SECONDS", "30"
    ))

    def __post_init__(self):
        self.classifier_type = _parse_enum(ClassifierType, self.classifier_type, "CLASSIFIER_TYPE")
        if self.max_prompt_length <= 0:
            raise ConfigError("MAX_PROMPT_LENGTH must be positive")

    def validate(self) -> List[str]:
        """Validate classifier configuration, return list of warnings"""
        warnings = []
        if self.classifier_type == ClassifierType.CHATGPT and not self.openai_api_key:
            warnings.append(
                "WARNING: OPENAI_API_KEY not set. ChatGPT classification will fail."
            )
        if self.classifier_type == ClassifierType.CLAUDE and not self.anthropic_api_key:
            warnings.append(
                "WARNING: ANTHROPIC_API_KEY not set. Falling back to keyword classification."
            )
        return warnings


@dataclass
class AppConfig:
    """Main application configuration"""
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    reconcile_on_startup: bool = field(default_factory=lambda: _env_bool("RECONCILE_ON_STARTUP"))

    # Sub-configurations
    api: ApiConfig = field(default_factory=ApiConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    tag_storage: TagStorageConfig = field(default_factory=TagStorageConfig)
    redis: RedisConfig = field(default_factory=RedisConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)

    def validate(self) -> List[str]:
        """Collect warnings from every sub-configuration"""
        warnings = []
        warnings.extend(self.api.validate())
        warnings.extend(self.classifier.validate())
        return warnings

    @property
    def uses_redis(self) -> bool:
        return (
            self.storage.storage_type == StorageType.REDIS
            or self.tag_storage.tag_storage_type == TagStorageType.REDIS
        )


def load_config() -> AppConfig:
    """
    Build the application configuration from the environment.

    Call once at startup and pass the result to create_app() and the factories.

    Raises:
        ConfigError: If a value is missing or malformed
    """
    return AppConfig()
