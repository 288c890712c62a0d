import json
import logging
import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

CONFIG_PATH = os.getenv("CONFIG_PATH", "config.json")


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0", description="Listening address")
    port: int = Field(default=3001, ge=1, le=65535, description="Listening port")


class RedisConfig(BaseModel):
    url: Optional[str] = Field(default=None, description="Redis connection URL (unset: in-memory rate limiting)")
    socket_timeout: int = Field(default=5, description="Redis socket timeout in seconds")


class RateLimitConfig(BaseModel):
    enabled: bool = Field(default=True, description="Enable rate limiting")
    max_requests: int = Field(default=20, ge=1, description="Max requests per window")
    window_seconds: int = Field(default=15 * 60, ge=1, description="Rate limit window in seconds")


class YtDlpConfig(BaseModel):
    binary: str = Field(default="yt-dlp", description="yt-dlp executable")
    timeout_seconds: float = Field(default=30.0, gt=0, description="Wall-clock bound per invocation")
    max_output_bytes: int = Field(default=10 * 1024 * 1024, ge=1024, description="Cap on captured stdout/stderr")
    max_formats: int = Field(default=5, ge=1, description="Formats returned by /api/extract")
    version_timeout_seconds: float = Field(default=10.0, gt=0, description="Timeout for the --version check")


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    format: str = Field(default="%(message)s", description="Log format")
    enable_rich: bool = Field(default=True, description="Enable rich console logging")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()


class I18nConfig(BaseModel):
    default_locale: str = Field(default="en", description="Default locale")
    supported_locales: list = Field(default=["en", "ja"], description="Supported locales")


class ApiConfig(BaseModel):
    title: str = Field(default="Twitter / X Video Downloader API", description="API title")
    version: str = Field(default="1.0.0", description="API version")
    cors_origins: list = Field(default=["*"], description="CORS allowed origins")
    debug: bool = Field(default=False, description="Enable debug mode")


class ClientConfig(BaseModel):
    api_url: str = Field(default="http://localhost:3001", description="API origin used by the client")
    timeout_seconds: float = Field(default=60.0, gt=0, description="HTTP timeout for client requests")


class Config(BaseModel):
    """Main configuration model"""
    server: ServerConfig = Field(default_factory=ServerConfig)
    redis: RedisConfig = Field(default_factory=RedisConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    ytdlp: YtDlpConfig = Field(default_factory=YtDlpConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    i18n: I18nConfig = Field(default_factory=I18nConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)

    @classmethod
    def load_from_file(cls, config_path: str = "config.json") -> "Config":
        """Load configuration from JSON file"""
        if os.path.exists(config_path):
            try:
                with open(config_path, "r", encoding="utf-8") as f:
                    config_data = json.load(f)
                logger.info(f"Configuration loaded from {config_path}")
                return cls(**config_data)
            except (OSError, ValueError) as e:
                logger.error(f"Failed to load config from {config_path}: {str(e)}")
                logger.info("Using default configuration")
        else:
            logger.warning(f"Config file {config_path} not found, using defaults")

        return cls()

    @classmethod
    def load_from_env(cls, environ: Optional[Dict[str, str]] = None) -> "Config":
        """Load configuration from environment variables"""
        env = os.environ if environ is None else environ
        config_data: Dict[str, Any] = {}

        server = {}
        if env.get("HOST"):
            server["host"] = env["HOST"]
        if env.get("PORT"):
            server["port"] = int(env["PORT"])
        if server:
            config_data["server"] = server

        if env.get("REDIS_URL"):
            config_data["redis"] = {"url": env["REDIS_URL"]}

        rate_limit: Dict[str, Any] = {}
        if env.get("RATE_LIMIT_ENABLED"):
            rate_limit["enabled"] = env["RATE_LIMIT_ENABLED"].lower() == "true"
        if env.get("RATE_LIMIT_REQUESTS"):
            rate_limit["max_requests"] = int(env["RATE_LIMIT_REQUESTS"])
        if env.get("RATE_LIMIT_WINDOW"):
            rate_limit["window_seconds"] = int(env["RATE_LIMIT_WINDOW"])
        if rate_limit:
            config_data["rate_limit"] = rate_limit

        ytdlp: Dict[str, Any] = {}
        if env.get("YTDLP_PATH"):
            ytdlp["binary"] = env["YTDLP_PATH"]
        if env.get("YTDLP_TIMEOUT"):
            ytdlp["timeout_seconds"] = float(env["YTDLP_TIMEOUT"])
        if ytdlp:
            config_data["ytdlp"] = ytdlp

        if env.get("LOG_LEVEL"):
            config_data["logging"] = {"level": env["LOG_LEVEL"]}

        if env.get("DEFAULT_LOCALE"):
            config_data["i18n"] = {"default_locale": env["DEFAULT_LOCALE"]}

        if env.get("CORS_ORIGINS"):
            origins = [o.strip() for o in env["CORS_ORIGINS"].split(",") if o.strip()]
            config_data["api"] = {"cors_origins": origins}

        if env.get("API_URL"):
            config_data["client"] = {"api_url": env["API_URL"]}

        return cls(**config_data) if config_data else cls()


def load_config() -> Config:
    """Load configuration with priority: config.json > env vars > defaults"""
    if os.path.exists(CONFIG_PATH):
        return Config.load_from_file(CONFIG_PATH)
    logger.info(f"Config file not found at {CONFIG_PATH}, checking environment variables")
    return Config.load_from_env()
