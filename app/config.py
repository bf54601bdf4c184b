from pydantic import SecretStr
from pydantic_settings import BaseSettings

from app.services.fatsecret_auth import ConsumerCredentials


class Settings(BaseSettings):
    # FatSecret OAuth 1.0 consumer
    consumer_key: str = ""
    consumer_secret: SecretStr = SecretStr("")

    # FatSecret API
    fatsecret_api_url: str = "https://platform.fatsecret.com/rest/server.api"
    fatsecret_timeout: float = 10.0
    search_max_results: int | None = None

    # Daily targets
    calorie_target: float = 2000
    protein_target: float = 150  # grams
    fat_target: float = 70  # grams
    carbs_target: float = 250  # grams

    # App
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()


def get_credentials(source: Settings | None = None) -> ConsumerCredentials:
    """Consumer credentials for signing FatSecret requests."""
    source = source or settings
    return ConsumerCredentials(
        consumer_key=source.consumer_key,
        consumer_secret=source.consumer_secret,
    )
