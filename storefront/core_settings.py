from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):
    # Database: DATABASE_URL wins over the POSTGRES_* parts
    DATABASE_URL: Optional[str] = None
    POSTGRES_HOST: str = "postgres"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "storefront"
    POSTGRES_USER: str = "storefront"
    POSTGRES_PASSWORD: str = "storefront"

    JWT_SECRET: str = "change-me"
    JWT_ALG: str = "HS256"
    JWT_EXPIRES_MINUTES: int = 7 * 24 * 60

    CURRENCY: str = "INR"
    HTTP_TIMEOUT_SECONDS: float = 30.0
    REDIS_URL: Optional[str] = None

    RAZORPAY_BASE_URL: str = "https://api.razorpay.com/v1"
    RAZORPAY_KEY_ID: str = ""
    RAZORPAY_KEY_SECRET: str = ""
    RAZORPAY_WEBHOOK_SECRET: Optional[str] = None

    SHIPROCKET_BASE_URL: str = "https://apiv2.shiprocket.in/v1/external"
    SHIPROCKET_EMAIL: str = ""
    SHIPROCKET_PASSWORD: str = ""
    SHIPROCKET_TRACKING_URL: str = "https://shiprocket.co/tracking/"
    SHIPROCKET_WEBHOOK_TOKEN: Optional[str] = None
    # Pickup address registered with Shiprocket
    SHIPROCKET_PICKUP_NAME: str = ""
    SHIPROCKET_PICKUP_EMAIL: str = ""
    SHIPROCKET_PICKUP_PHONE: str = ""
    SHIPROCKET_PICKUP_STREET: str = ""
    SHIPROCKET_PICKUP_CITY: str = ""
    SHIPROCKET_PICKUP_STATE: str = ""
    SHIPROCKET_PICKUP_PINCODE: str = ""
    SHIPROCKET_PICKUP_COUNTRY: str = "India"
    SHIPROCKET_PICKUP_LOCATION: Optional[str] = None

    SERVICE_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    def missing_required(self) -> list[str]:
        """Names of settings checkout and shipping cannot run without."""
        required = (
            "RAZORPAY_KEY_ID",
            "RAZORPAY_KEY_SECRET",
            "SHIPROCKET_EMAIL",
            "SHIPROCKET_PASSWORD",
            "SHIPROCKET_PICKUP_PINCODE",
        )
        return [name for name in required if not getattr(self, name)]

    @property
    def razorpay_webhook_secret(self) -> str:
        return self.RAZORPAY_WEBHOOK_SECRET or self.RAZORPAY_KEY_SECRET

@lru_cache
def get_settings() -> Settings:
    return Settings()
