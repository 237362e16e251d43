from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = "BACKOFFICE-NAV"
    LOG_LEVEL: str = "INFO"
    DATABASE_URL: str = "sqlite+pysqlite:///./backoffice_nav.db"
    MENU_STORAGE_BACKEND: str = "memory"
    MENU_STORAGE_PATH: str = "./artifacts/menu_store.json"
    MENU_KEY_PREFIX: str = "sushiblack_sidebar"
    INJECTED_ORDER_BASE: int = 90
    DEFAULT_MEMBER_ROLE: str = "COCINA"

settings = Settings()
