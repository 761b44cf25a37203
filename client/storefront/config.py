from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    BASE_API_URL: str = "http://localhost:5000/api"
    HTTP_TIMEOUT_SECONDS: float = 10.0
    DATABASE_URL: str = "sqlite:///./storefront.db"
    RESTORE_RETRY_ATTEMPTS: int = 3
    RESTORE_RETRY_DELAY_MS: int = 200
    CART_SET_QUANTITY_ENABLED: bool = False
    PAYMENT_BANK_CODE: str = ""
    PAYMENT_LOCALE: str = "vn"
    PAYMENT_RETURN_URL: str = "storefront://payment-result"
    CURRENCY: str = "VND"
    FRONTEND_ORIGINS: List[str] = ["http://localhost:8081"]
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
