"""
Application settings loaded from environment variables
"""
import os
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

STORAGE_BACKENDS = ("sql", "memory")


def _split(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Runtime configuration for the API"""
    app_name: str = "ShopMaster API"
    app_version: str = "1.0.0"
    database_url: str = "sqlite:///./shopmaster.db"
    storage_backend: str = "sql"
    secret_key: str = "dev-secret-change-me"
    session_max_age: int = 7 * 24 * 60 * 60
    allowed_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])
    allowed_methods: List[str] = field(default_factory=lambda: ["GET", "POST", "PUT", "PATCH", "DELETE"])
    allowed_headers: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    log_dir: Optional[str] = None
    tax_rate: Decimal = Decimal("0.08")
    free_shipping_threshold: Decimal = Decimal("50")
    shipping_fee: Decimal = Decimal("9.99")
    seed_demo_data: bool = True
    admin_username: str = "admin"
    admin_email: str = "admin@shopmaster.com"
    admin_password: str = "admin123"

    def __post_init__(self):
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"Unknown storage backend {self.storage_backend!r}, expected one of {STORAGE_BACKENDS}"
            )

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            app_name=os.getenv("APP_NAME", "ShopMaster API"),
            app_version=os.getenv("APP_VERSION", "1.0.0"),
            database_url=os.getenv("DATABASE_URL", "sqlite:///./shopmaster.db"),
            storage_backend=os.getenv("STORAGE_BACKEND", "sql").lower(),
            secret_key=os.getenv("SECRET_KEY", "dev-secret-change-me"),
            session_max_age=int(os.getenv("SESSION_MAX_AGE", 7 * 24 * 60 * 60)),
            allowed_origins=_split(os.getenv("ALLOWED_ORIGINS", "http://localhost:3000")),
            allowed_methods=_split(os.getenv("ALLOWED_METHODS", "GET,POST,PUT,PATCH,DELETE")),
            allowed_headers=_split(os.getenv("ALLOWED_HEADERS", "*")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_dir=os.getenv("LOG_DIR") or None,
            tax_rate=Decimal(os.getenv("TAX_RATE", "0.08")),
            free_shipping_threshold=Decimal(os.getenv("FREE_SHIPPING_THRESHOLD", "50")),
            shipping_fee=Decimal(os.getenv("SHIPPING_FEE", "9.99")),
            seed_demo_data=_as_bool(os.getenv("SEED_DEMO_DATA", "true")),
            admin_username=os.getenv("ADMIN_USERNAME", "admin"),
            admin_email=os.getenv("ADMIN_EMAIL", "admin@shopmaster.com"),
            admin_password=os.getenv("ADMIN_PASSWORD", "admin123"),
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
