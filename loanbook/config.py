"""Configuration management using Pydantic Settings"""

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Batch run configuration loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_prefix="LOANBOOK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Input/output locations
    data_dir: Path = Path(".")
    output_dir: Path = Path(".")

    banks_file: str = "banks.csv"
    facilities_file: str = "facilities.csv"
    covenants_file: str = "covenants.csv"
    loans_file: str = "loans.csv"

    assignments_file: str = "assignments.csv"
    yields_file: str = "yields.csv"
    unassigned_file: str = "unassigned.csv"

    # Allocation policy
    candidate_order: Literal["cost_ascending", "load_order"] = "cost_ascending"
    yield_rounding: Literal["half_up", "half_even"] = "half_up"
    reject_negative_yield: bool = False
    write_unassigned_report: bool = True

    # Service
    service_name: str = "loanbook"
    log_level: str = "INFO"


settings = Settings()
