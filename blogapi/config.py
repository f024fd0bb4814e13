# blogapi/config.py
import os
from dataclasses import dataclass, field


@dataclass
class ServerConfig:
    """Blog service listener settings"""
    host: str = field(default_factory=lambda: os.getenv('HOST', '0.0.0.0'))
    port: int = field(default_factory=lambda: int(os.getenv('PORT', '8080')))
    log_level: str = field(default_factory=lambda: os.getenv('LOG_LEVEL', 'INFO').upper())
    allowed_origins: list = field(
        default_factory=lambda: os.getenv('ALLOWED_ORIGINS', '*').split(',')
    )


@dataclass
class DatabaseConfig:
    """MongoDB connection settings"""
    url: str = field(
        default_factory=lambda: os.getenv('DATABASE_URL', 'mongodb://localhost:27017/blog-app')
    )
    test_url: str = field(
        default_factory=lambda: os.getenv('TEST_DATABASE_URL', 'mongodb://localhost:27017/test-blog-app')
    )
    timeout_ms: int = field(default_factory=lambda: int(os.getenv('DB_TIMEOUT_MS', '5000')))

    def __post_init__(self):
        if not self.url.startswith(('mongodb://', 'mongodb+srv://')):
            raise ValueError(
                "DATABASE_URL must be a MongoDB connection string "
                "(mongodb:// or mongodb+srv://)."
            )


class Config:
    def __init__(self):
        self.server = ServerConfig()
        self.database = DatabaseConfig()
        self.DATABASE_URL = self.database.url
        self.TEST_DATABASE_URL = self.database.test_url
        self.PORT = self.server.port


# Prometheus Metrics Configuration
REQUEST_LATENCY_BUCKETS = (
    0.001,
    0.005,
    0.01,
    0.025,
    0.05,
    0.075,
    0.1,
    0.25,
    0.5,
    0.75,
    1.0,
    2.5,
    5.0,
    10.0,
)

DEFAULT_DB_NAME = 'blog-app'

config = Config()
