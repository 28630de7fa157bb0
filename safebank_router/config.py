"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Coverage
    coverage_limit: int = 50_000_000  # Per-license cap before the policy change
    coverage_limit_post_policy: int = 100_000_000
    default_fx_rate: float = 1400.0  # Demo USD -> KRW rate

    # Routing
    liquidity_reserve: int = 10_000_000
    per_offer_ceiling: int = 60_000_000

    # Catalog sources
    catalog_csv_path: str = "data/kdic_products.csv"
    kdic_service_key: str = ""
    kdic_product_url: str = (
        "https://apis.data.go.kr/B190017/service/GetInsuredProductService202008/getProductList202008"
    )
    kdic_page_size: int = 500
    kdic_max_pages: int = 50

    # Holdings sources
    use_mock_holdings: bool = True
    holdings_api_url: str | None = None
    mock_protected_count: int = 10
    mock_nonprotected_count: int = 2
    mock_seed: int | None = None

    # Service
    service_name: str = "safebank-router"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0

    def cap_for_policy(self, policy: str) -> int:
        """Per-license cap for the "pre" or "post" deposit-protection policy"""
        return self.coverage_limit_post_policy if policy == "post" else self.coverage_limit


settings = Settings()
