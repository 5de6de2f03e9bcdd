import os
from dataclasses import dataclass

MIN_REFRESH_INTERVAL_SECONDS = 60

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


@dataclass(frozen=True)
class ScraperOptions:
    base_url: str = "https://www.amazon.com"
    user_agent: str = DEFAULT_USER_AGENT
    accept_language: str = "en-US,en;q=0.9"
    timeout_seconds: float = 15.0


@dataclass(frozen=True)
class RefreshOptions:
    enabled: bool = True
    interval_seconds: int = 900
    max_products_per_cycle: int = 25
    max_concurrency: int = 1

    @property
    def effective_interval(self) -> float:
        return float(max(MIN_REFRESH_INTERVAL_SECONDS, self.interval_seconds))


class Settings:
    APP_ENV = os.getenv("APP_ENV", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL")

    DATABASE_URL = os.getenv(
        "DATABASE_URL",
        "postgresql+psycopg2://tagtrack:secret@db:5432/tagtrack",
    )

    ALLOWED_ORIGINS = [
        origin.strip()
        for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:5173").split(",")
        if origin.strip()
    ]

    PRICE_FETCHER = os.getenv("PRICE_FETCHER", "live").lower()

    AMAZON_BASE_URL = os.getenv("AMAZON_BASE_URL", "https://www.amazon.com")
    AMAZON_USER_AGENT = os.getenv("AMAZON_USER_AGENT", DEFAULT_USER_AGENT)
    AMAZON_ACCEPT_LANGUAGE = os.getenv("AMAZON_ACCEPT_LANGUAGE", "en-US,en;q=0.9")
    SCRAPER_TIMEOUT_SECONDS = float(os.getenv("SCRAPER_TIMEOUT_SECONDS", "15"))

    PRICE_REFRESH_ENABLED = _env_bool("PRICE_REFRESH_ENABLED", True)
    PRICE_REFRESH_INTERVAL_SECONDS = _env_int("PRICE_REFRESH_INTERVAL_SECONDS", 900)
    PRICE_REFRESH_MAX_PRODUCTS = _env_int("PRICE_REFRESH_MAX_PRODUCTS", 25)
    PRICE_REFRESH_CONCURRENCY = _env_int("PRICE_REFRESH_CONCURRENCY", 1)

    ENABLE_DEV_ROUTES = _env_bool("ENABLE_DEV_ROUTES", APP_ENV != "production")

    def scraper_options(self) -> ScraperOptions:
        return ScraperOptions(
            base_url=self.AMAZON_BASE_URL,
            user_agent=self.AMAZON_USER_AGENT,
            accept_language=self.AMAZON_ACCEPT_LANGUAGE,
            timeout_seconds=self.SCRAPER_TIMEOUT_SECONDS,
        )

    def refresh_options(self) -> RefreshOptions:
        return RefreshOptions(
            enabled=self.PRICE_REFRESH_ENABLED,
            interval_seconds=self.PRICE_REFRESH_INTERVAL_SECONDS,
            max_products_per_cycle=self.PRICE_REFRESH_MAX_PRODUCTS,
            max_concurrency=max(1, self.PRICE_REFRESH_CONCURRENCY),
        )


settings = Settings()
