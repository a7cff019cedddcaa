import logging

from pydantic_settings import BaseSettings

_logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # App
    APP_NAME: str = "imagegrid"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # Upstream search gateway (Google Custom Search JSON API)
    GOOGLE_API_KEY: str = ""
    GOOGLE_SEARCH_ENGINE_ID: str = ""
    SEARCH_API_URL: str = "https://www.googleapis.com/customsearch/v1"
    SEARCH_PAGE_SIZE: int = 10  # Custom Search caps num at 10
    SEARCH_IMAGE_SIZE: str = "xlarge"

    # Image proxy
    PROXY_TIMEOUT_SECONDS: float = 10.0
    PROXY_USER_AGENT: str = "imagegrid-proxy/0.1 (+https://github.com/imagegrid)"
    PROXY_CACHE_CONTROL: str = "public, max-age=86400, stale-while-revalidate=604800"

    # Sentry
    SENTRY_DSN: str = ""
    SENTRY_TRACES_SAMPLE_RATE: float = 0.2
    SENTRY_ENVIRONMENT: str = "development"

    # Logging
    LOG_FORMAT: str = "json"  # "json" for production, "text" for development
    LOG_LEVEL: str = "INFO"

    # Metrics
    METRICS_ENABLED: bool = True

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def search_configured(self) -> bool:
        return bool(self.GOOGLE_API_KEY and self.GOOGLE_SEARCH_ENGINE_ID)

    def model_post_init(self, __context) -> None:
        if not self.search_configured:
            _logger.warning(
                "GOOGLE_API_KEY / GOOGLE_SEARCH_ENGINE_ID not set; "
                "/api/search will answer 500 until both are provided."
            )


settings = Settings()
