"""Environment configuration for the Gatepass service.

Values come from ``GATEPASS_*`` environment variables or a ``.env`` file and
feed ``gatepass/settings.py``.
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="GATEPASS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    secret_key: str = "django-insecure-dev-only-change-me"
    debug: bool = False
    allowed_hosts: list[str] = ["localhost", "127.0.0.1"]

    # Database: sqlite for development, postgresql for real row locks.
    db_engine: str = "sqlite"
    db_name: str = str(Path(__file__).resolve().parent.parent / "db.sqlite3")
    db_user: str = ""
    db_password: str = ""
    db_host: str = ""
    db_port: str = ""

    cache_backend: str = "django.core.cache.backends.locmem.LocMemCache"
    cache_location: str = "gatepass"
    cache_timeout_seconds: int = 300

    ticket_code_bytes: int = 10
    qr_ttl_seconds: int = 24 * 60 * 60

    log_level: str = "INFO"

    @property
    def database(self) -> dict:
        if self.db_engine == "sqlite":
            return {"ENGINE": "django.db.backends.sqlite3", "NAME": self.db_name}
        return {
            "ENGINE": f"django.db.backends.{self.db_engine}",
            "NAME": self.db_name,
            "USER": self.db_user,
            "PASSWORD": self.db_password,
            "HOST": self.db_host,
            "PORT": self.db_port,
        }


settings = Settings()
