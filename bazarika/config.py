from pydantic_settings import BaseSettings
from typing import List, Optional
from urllib.parse import quote_plus

class Settings(BaseSettings):
    ENV: str = "local"
    LOG_LEVEL: str = "INFO"

    # full URL wins over the postgres parts
    DATABASE_URL: Optional[str] = None
    postgres_user: str = "postgres"
    postgres_password: str = ""
    postgres_db: str = "bazarika"
    postgres_host: str = "localhost"
    postgres_port: str = "5432"

    # tokens are issued by the hosted auth provider, we only verify them
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_audience: Optional[str] = "authenticated"
    access_token_expire_minutes: int = 60

    ADMIN_EMAILS: List[str] = []
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    FREE_SHIPPING_THRESHOLD: float = 2000
    SHIPPING_FEE: float = 100
    LOW_STOCK_THRESHOLD: int = 10
    ORDER_NUMBER_PREFIX: str = "BZK"

    @property
    def database_url(self):
        if self.DATABASE_URL:
            return self.DATABASE_URL

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
