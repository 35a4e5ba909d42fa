# src/propkpi/adapters/config.py
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from propkpi.domain.financials import EngineDefaults
from propkpi.domain.records import Assumptions


class AppConfig(BaseSettings):
    # App & logging
    ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")

    # Market-standard defaults (the lowest-priority source)
    VACANCY_RATE: float = Field(default=0.05)
    MANAGEMENT_FEE_RATE: float = Field(default=0.08)
    MARKET_CAP_RATE: float = Field(default=0.055)
    # 0 means "no blended expense line" when nothing is itemized
    EXPENSE_RATIO: float = Field(default=0.0)
    # 0 means "never invent a loan" when no loan data exists
    LOAN_PERCENTAGE: float = Field(default=0.0)
    INTEREST_RATE: float = Field(default=0.07)
    LOAN_TERM_YEARS: int = Field(default=30)

    # Estimates with no bundle of their own
    APPRECIATION_FACTOR: float = Field(default=1.0)
    CLOSING_COST_RATE: float = Field(default=0.02)
    HOLDING_COST_RATE: float = Field(default=0.01)

    # -----------------------------
    # Consistency checks vs persisted legacy values
    # -----------------------------
    CASH_FLOW_DRIFT_TOLERANCE: float = Field(default=0.05)    # relative
    COC_DRIFT_TOLERANCE: float = Field(default=0.01)          # absolute, 1 point

    model_config = SettingsConfigDict(
        env_prefix="PROPKPI_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator(
        "VACANCY_RATE",
        "MANAGEMENT_FEE_RATE",
        "MARKET_CAP_RATE",
        "EXPENSE_RATIO",
        "LOAN_PERCENTAGE",
        "INTEREST_RATE",
        "CLOSING_COST_RATE",
        "HOLDING_COST_RATE",
        mode="before",
    )
    @classmethod
    def _to_non_negative_fraction(cls, v: Any) -> Any:
        if v is None:
            return v
        if isinstance(v, str):
            v = v.strip().replace("%", "")
        try:
            f = float(v)
        except Exception as err:
            raise ValueError("rate must be numeric or percent-like") from err
        if f > 1.0:
            f = f / 100.0
        if f < 0:
            raise ValueError("rate must be non-negative")
        return f

    @field_validator("LOAN_TERM_YEARS", mode="before")
    @classmethod
    def _term_positive(cls, v: Any) -> Any:
        n = int(v)
        if n <= 0:
            raise ValueError("LOAN_TERM_YEARS must be > 0")
        return n

    @field_validator("APPRECIATION_FACTOR", mode="before")
    @classmethod
    def _factor_positive(cls, v: Any) -> Any:
        f = float(v)
        if f <= 0:
            raise ValueError("APPRECIATION_FACTOR must be > 0")
        return f

    def engine_defaults(self) -> EngineDefaults:
        return EngineDefaults(
            assumptions=Assumptions(
                vacancy_rate=self.VACANCY_RATE,
                management_fee_rate=self.MANAGEMENT_FEE_RATE,
                exit_cap_rate=self.MARKET_CAP_RATE,
                expense_ratio=self.EXPENSE_RATIO,
                loan_percentage=self.LOAN_PERCENTAGE,
                interest_rate=self.INTEREST_RATE,
                loan_term_years=self.LOAN_TERM_YEARS,
            ),
            appreciation_factor=self.APPRECIATION_FACTOR,
            closing_cost_rate=self.CLOSING_COST_RATE,
            holding_cost_rate=self.HOLDING_COST_RATE,
        )


config = AppConfig()
