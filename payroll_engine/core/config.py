from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # Application Configuration
    app_name: str = "Payroll Calculation Engine"
    debug: bool = False

    # Logging Configuration
    log_level: str = "INFO"
    log_file: Optional[str] = None
    enable_file_rotation: bool = True

    # Reference Data Cache
    reference_cache_ttl_seconds: int = 300  # 5 minutes

    # Bulk Calculation
    bulk_batch_size: int = 50  # employees in flight per batch

    # Access Control
    privileged_roles: List[str] = ["admin", "hr"]  # may calculate for any employee
    bulk_roles: List[str] = ["admin", "hr", "payroll_admin"]

    class Config:
        env_file = ".env"
        case_sensitive = False


# Create settings instance
settings = Settings()
