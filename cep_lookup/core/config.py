import os
from pydantic import BaseModel

class Settings(BaseModel):
    # Basic
    ENV: str = os.getenv("ENV", "dev")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Upstream (ViaCEP)
    VIACEP_BASE_URL: str = os.getenv("VIACEP_BASE_URL", "https://viacep.com.br/ws")
    CEP_TIMEOUT_MS: int = int(os.getenv("CEP_TIMEOUT_MS", "5000"))
    BATCH_MAX_ITEMS: int = int(os.getenv("BATCH_MAX_ITEMS", "50"))

    # Security
    API_KEY: str | None = os.getenv("API_KEY")

    # CORS
    ALLOW_ORIGINS: str = os.getenv("ALLOW_ORIGINS", "*")

    # Metrics
    PROMETHEUS_ENABLED: bool = os.getenv("PROMETHEUS_ENABLED", "true").lower() == "true"

settings = Settings()
