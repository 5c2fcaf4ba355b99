"""Core HR Pydantic v2 schemas — salary config, capabilities, employee I/O."""

from datetime import date
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from liveops.common.money import coerce_amount


def _amount(*legacy: str) -> Any:
    return Field(default=0, validation_alias=AliasChoices(*legacy))


# ═════════════════════════════════════════════════════════════════════
# Salary configuration
# ═════════════════════════════════════════════════════════════════════


class SalaryConfig(BaseModel):
    """Monthly salary components in the smallest currency unit.

    Accepts both snake_case names and the legacy camelCase blob keys;
    missing or garbled fields default to 0.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # Fixed earnings
    base_salary: int = _amount("base_salary", "gapok")
    meal_allowance: int = _amount("meal_allowance", "tunjanganMakan")
    transport_allowance: int = _amount("transport_allowance", "tunjanganTransport")
    communication_allowance: int = _amount("communication_allowance", "tunjanganKomunikasi")
    health_allowance: int = _amount("health_allowance", "tunjanganKesehatan")
    position_allowance: int = _amount("position_allowance", "tunjanganJabatan")

    # Deductions
    social_security: int = _amount("social_security", "bpjstk")
    income_tax: int = _amount("income_tax", "pph21")
    debt_deduction: int = _amount("debt_deduction", "potonganHutang")
    other_deduction: int = _amount("other_deduction", "potonganLain")

    # Variable earnings
    overtime: int = _amount("overtime", "lembur")
    bonus: int = _amount("bonus")
    holiday_bonus: int = _amount("holiday_bonus", "thr")

    @field_validator("*", mode="before")
    @classmethod
    def _lenient_amount(cls, value: Any) -> int:
        return coerce_amount(value)

    @classmethod
    def from_blob(cls, blob: Optional[dict]) -> "SalaryConfig":
        """Build from a stored blob; anything that is not a dict yields zeros."""
        return cls.model_validate(blob if isinstance(blob, dict) else {})


# ═════════════════════════════════════════════════════════════════════
# Employee
# ═════════════════════════════════════════════════════════════════════


class EmployeeCapabilities(BaseModel):
    """Role flags resolved once from the job title."""

    model_config = ConfigDict(frozen=True)

    is_creator: bool = False
    is_host: bool = False
    is_live_streaming_host: bool = False
    is_business_development: bool = False


class EmployeeProfile(BaseModel):
    """Normalised employee, the input shape of the pure engines."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    job_title: str = ""
    division: Optional[str] = None
    company: str = ""
    hire_date: Optional[date] = None
    is_remote_allowed: bool = False
    salary: SalaryConfig = Field(default_factory=SalaryConfig)
    capabilities: EmployeeCapabilities = Field(default_factory=EmployeeCapabilities)


class EmployeeCreate(BaseModel):
    id: str = Field(..., min_length=1, max_length=64)
    employee_code: Optional[str] = Field(None, max_length=30)
    name: str = Field(..., min_length=1, max_length=150)
    email: Optional[str] = None
    job_title: str = ""
    division: Optional[str] = None
    company: str = Field(..., min_length=1, max_length=100)
    hire_date: Optional[str] = None
    is_remote_allowed: bool = False
    salary_config: Optional[dict[str, Any]] = None


class EmployeeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    email: Optional[str] = None
    job_title: Optional[str] = None
    division: Optional[str] = None
    hire_date: Optional[str] = None
    is_remote_allowed: Optional[bool] = None
    salary_config: Optional[dict[str, Any]] = None
    outstanding_debt: Optional[int] = None


class EmployeeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    employee_code: Optional[str] = None
    name: str
    email: Optional[str] = None
    job_title: str = ""
    division: Optional[str] = None
    company: str
    hire_date: Optional[date] = None
    tenure_years: Optional[int] = None
    tenure_months: Optional[int] = None
    is_remote_allowed: bool = False
    capabilities: EmployeeCapabilities
    salary: SalaryConfig
