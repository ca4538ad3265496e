from typing import List, Optional
from pydantic_settings import BaseSettings
from urllib.parse import quote_plus

class Settings(BaseSettings):
    ENV: str = "local"
    log_level: str = "INFO"
    store_name: str = "Happy Flower Shop"

    postgres_user: str = "postgres"
    postgres_password: str = ""
    postgres_db: str = "happy_flower"
    postgres_host: str = "localhost"
    postgres_port: str = "5432"

    # full URL override (tests, sqlite, managed hosts)
    sqlalchemy_url: Optional[str] = None

    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    base_url: str = "http://localhost:5173"
    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]

    # Payments (Razorpay payment links)
    razorpay_key_id: str = ""
    razorpay_key_secret: str = ""
    razorpay_webhook_secret: str = ""
    currency: str = "USD"
    delivery_fee: float = 9.99

    # Chat assistant (Perplexity chat completions)
    perplexity_api_key: str = ""
    perplexity_api_url: str = "https://api.perplexity.ai/chat/completions"
    perplexity_model: str = "sonar-pro"

    # Image generation (Runware)
    runware_api_key: str = ""
    runware_api_url: str = "https://api.runware.ai/v1"
    runware_model: str = "runware:100@1"

    catalog_cache_ttl_seconds: int = 30 * 60

    @property
    def database_url(self):
        if self.sqlalchemy_url:
            return self.sqlalchemy_url

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

settings = Settings()
