from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    log_level: str = "INFO"

    # Requests per client IP per minute before the API answers 429
    rate_limit_per_minute: int = 120
    # Separate per-IP budget for the evaluate, inspect and validate endpoints
    evaluation_rate_limit_per_minute: int = 60

    # Fixed ETH/USD conversion for netUSDChange criteria: 250 cents per 0.001 ETH
    usd_cents_per_milli_eth: int = 250

    # Extra trusted verifying contracts, comma-separated
    trusted_contracts: str = ""

    cors_origins: str = "*"

    class Config:
        env_file = ".env"
        extra = "ignore"

    def trusted_contract_list(self) -> list[str]:
        return [a.strip() for a in self.trusted_contracts.split(",") if a.strip()]

    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
