"""
Configuration management for the FuelEU Ledger API.
Loads environment variables and provides typed configuration.
"""
from typing import Dict, List, Optional
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.compliance.calculations import (
    ENERGY_CONVERSION_MJ_PER_T,
    REFERENCE_GHG_INTENSITY,
    TARGET_REDUCTION_PCT,
    TargetIntensityPolicy,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ========================================================================
    # Database Configuration
    # ========================================================================
    database_url: str = "sqlite:///./fueleu_ledger.db"
    db_echo: bool = False

    # ========================================================================
    # Redis Configuration (rate limit storage)
    # ========================================================================
    redis_url: str = "redis://localhost:6379/0"
    redis_enabled: bool = True

    # ========================================================================
    # API Configuration
    # ========================================================================
    api_key_header: str = "X-API-Key"
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # ========================================================================
    # CORS Configuration
    # ========================================================================
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    # ========================================================================
    # Rate Limiting
    # ========================================================================
    rate_limit_enabled: bool = True
    rate_limit_per_minute: int = 60
    rate_limit_per_hour: int = 1000

    # ========================================================================
    # Application Configuration
    # ========================================================================
    environment: str = "development"
    log_level: str = "info"
    debug: bool = False

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment.lower() == "development"

    # ========================================================================
    # FuelEU Compliance Parameters
    # ========================================================================
    # Target defaults to reference * (1 - reduction); set it to pin a value
    target_ghg_intensity: Optional[float] = None  # gCO2eq/MJ
    reference_ghg_intensity: float = REFERENCE_GHG_INTENSITY  # gCO2eq/MJ
    target_reduction_pct: float = TARGET_REDUCTION_PCT
    energy_conversion_mj_per_t: float = ENERGY_CONVERSION_MJ_PER_T
    # JSON map, e.g. TARGET_INTENSITY_BY_YEAR='{"2030": 85.6904}'
    target_intensity_by_year: Dict[int, float] = {}

    def target_policy(self) -> TargetIntensityPolicy:
        """Target intensity resolver built from these settings."""
        if self.target_ghg_intensity is not None:
            return TargetIntensityPolicy(
                default=self.target_ghg_intensity,
                by_year=dict(self.target_intensity_by_year),
            )
        return TargetIntensityPolicy.from_reduction(
            reference=self.reference_ghg_intensity,
            reduction_pct=self.target_reduction_pct,
            by_year=self.target_intensity_by_year,
        )

    # ========================================================================
    # Pydantic Settings Configuration
    # ========================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings
    """
    return Settings()


# Convenience exports
settings = get_settings()

# Validate critical settings in production
if settings.is_production:
    if "localhost" in settings.cors_origins.lower():
        raise ValueError(
            "CORS_ORIGINS must not include localhost in production!"
        )
