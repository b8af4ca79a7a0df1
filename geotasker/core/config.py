from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    ENV_STATE: str = "dev"
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class GlobalConfig(BaseConfig):
    IMAGERY_API_KEY: str | None = None
    IMAGERY_API_BASE_URL: str = "https://app.skyfi.com/platform-api"
    IMAGERY_API_TIMEOUT: float = 30.0  # seconds, per request
    IMAGERY_API_RETRY_ATTEMPTS: int = 3
    IMAGERY_API_RETRY_DELAY: float = 1.0  # base backoff in seconds
    FEASIBILITY_POLL_ATTEMPTS: int = 10
    FEASIBILITY_POLL_INTERVAL: float = 3.0
    BULK_FEASIBILITY_DELAY: float = 0.25
    BULK_ORDER_DELAY: float = 0.5
    LOG_DIR: str = "logs"


class DevConfig(GlobalConfig):
    model_config = SettingsConfigDict(env_prefix="DEV_")


class TestConfig(GlobalConfig):
    IMAGERY_API_RETRY_DELAY: float = 0.0
    FEASIBILITY_POLL_INTERVAL: float = 0.0
    BULK_FEASIBILITY_DELAY: float = 0.0
    BULK_ORDER_DELAY: float = 0.0
    model_config = SettingsConfigDict(env_prefix="TEST_")


class ProdConfig(GlobalConfig):
    model_config = SettingsConfigDict(env_prefix="PROD_")


@lru_cache()
def get_config(env_state: str):
    config_dict = {"dev": DevConfig, "test": TestConfig, "prod": ProdConfig}
    return config_dict[env_state]()


config = get_config(BaseConfig().ENV_STATE)
