import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from core.models.tracking import TrackingOptions

load_dotenv(override=True)


class AuthorityAPIConfig(BaseModel):
    base_url: str = os.getenv(
        "AUTHORITY_BASE_URL", "https://k-invoices-api-prod.azurewebsites.net/api"
    )
    test_base_url: str = os.getenv(
        "AUTHORITY_TEST_BASE_URL", "https://k-invoices-api-dev.azurewebsites.net/api"
    )
    api_key: Optional[str] = os.getenv("AUTHORITY_API_KEY")
    is_production: bool = os.getenv("AUTHORITY_ENVIRONMENT", "test") == "production"
    health_timeout: float = float(os.getenv("AUTHORITY_HEALTH_TIMEOUT", "5"))

    def resolve_base_url(self, is_production: Optional[bool] = None) -> str:
        production = self.is_production if is_production is None else is_production
        return self.base_url if production else self.test_base_url


class ContingencyConfig(BaseModel):
    # Fixed-interval resubmission, no exponential backoff
    sweep_interval: float = float(os.getenv("CONTINGENCY_SWEEP_INTERVAL", "60"))
    max_attempts: int = int(os.getenv("CONTINGENCY_MAX_ATTEMPTS", "5"))
    retention_hours: float = float(os.getenv("CONTINGENCY_RETENTION_HOURS", "24"))
    submission_delay: float = float(os.getenv("CONTINGENCY_SUBMISSION_DELAY", "1.0"))
    request_timeout: float = float(os.getenv("CONTINGENCY_REQUEST_TIMEOUT", "30"))


class TrackingConfig(BaseModel):
    polling_interval: float = float(os.getenv("TRACKING_POLLING_INTERVAL", "30"))
    max_retries: int = int(os.getenv("TRACKING_MAX_RETRIES", "10"))
    timeout: float = float(os.getenv("TRACKING_TIMEOUT", "600"))
    request_timeout: float = float(os.getenv("TRACKING_REQUEST_TIMEOUT", "15"))
    batch_stagger: float = float(os.getenv("TRACKING_BATCH_STAGGER", "5"))

    def default_options(self) -> TrackingOptions:
        return TrackingOptions(
            polling_interval=self.polling_interval,
            max_retries=self.max_retries,
            timeout=self.timeout,
            request_timeout=self.request_timeout,
        )


class AppConfig(BaseModel):
    authority: AuthorityAPIConfig = AuthorityAPIConfig()
    contingency: ContingencyConfig = ContingencyConfig()
    tracking: TrackingConfig = TrackingConfig()
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


config = AppConfig()
