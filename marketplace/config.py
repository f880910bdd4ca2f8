from decimal import Decimal
from typing import List, Optional
from urllib.parse import quote_plus

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    ENV: str = "local"

    postgres_user: str = "marketplace"
    postgres_password: str = ""
    postgres_db: str = "marketplace"
    postgres_host: str = "localhost"
    postgres_port: str = "5432"

    # full URL wins over the postgres_* parts (tests point this at sqlite)
    database_url_override: Optional[str] = Field(default=None, alias="DATABASE_URL")

    secret_key: str = "change-me"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # money rules
    commission_rate: Decimal = Decimal("10")
    shipping_fee: Decimal = Decimal("9.99")
    tax_rate: Decimal = Decimal("0.15")

    # orders per customer email per window; retries of a known request_id are free
    checkout_rate_limit_max_orders: int = 20
    checkout_rate_limit_window_seconds: int = 15 * 60

    log_level: str = "INFO"
    log_file: Optional[str] = None

    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]

    @property
    def database_url(self):
        if self.database_url_override:
            return self.database_url_override
        encoded_password = quote_plus(self.postgres_password)
        return (
            f"postgresql+psycopg2://{self.postgres_user}:"
            f"{encoded_password}@{self.postgres_host}:"
            f"{self.postgres_port}/{self.postgres_db}"
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "allow"
        populate_by_name = True


settings = Settings()
