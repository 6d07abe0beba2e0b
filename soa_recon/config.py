"""Configuration from environment variables."""

from decimal import Decimal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Invoice data API (candidate invoices for matching)
    invoice_api_url: str = "http://invoices.internal.svc.cluster.local"
    invoice_api_key: str = ""
    invoice_api_timeout: float = 30.0

    # Invoice statuses eligible as match candidates
    candidate_statuses: list[str] = ["pending", "approved", "paid"]

    # Matching tolerances
    date_tolerance_days: int = 7
    amount_tolerance_absolute: Decimal = Decimal("1.00")
    amount_tolerance_percent: Decimal = Decimal("0.005")

    # Batch matching fetches candidates once per vendor/company scope
    share_invoice_pool: bool = True

    class Config:
        env_prefix = "SOA_"
        case_sensitive = False


settings = Settings()
