from typing import Literal

from pydantic import BaseModel, Field, ValidationError


class AnalyticsSettings(BaseModel):
    history_sessions: int = Field(default=3, ge=1)
    recent_sessions: int = Field(default=3, ge=1)
    weight_increment_pct: float = Field(default=2.5, gt=0)
    weight_rounding: float = Field(default=0.5, gt=0)
    deload_pct: float = Field(default=10.0, ge=0, le=50)
    recent_days: int = Field(default=30, ge=1)
    log_level: str = "INFO"
    weight_unit: Literal["kg", "lbs"] = "kg"


def validate_settings(data: dict) -> AnalyticsSettings:
    try:
        return AnalyticsSettings(**data)
    except ValidationError as e:
        raise ValueError(str(e))
