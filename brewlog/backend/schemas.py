import re
from datetime import datetime, timedelta
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, FiniteFloat, PlainSerializer
from pydantic.alias_generators import to_camel

from .models import BrewMethod, EquipmentType, RoastLevel

TIMESPAN_PATTERN = re.compile(r"(?:(\d+)\.)?(\d+):(\d{1,2}):(\d{1,2})(?:\.(\d+))?")

# SQLite INTEGER is a signed 64-bit value
SQL_INT_MIN = -(2**63)
SQL_INT_MAX = 2**63 - 1


def _timedelta(value: Any, **parts) -> timedelta:
    try:
        return timedelta(**parts)
    except OverflowError as exc:
        raise ValueError(f"Duration '{value}' is out of range") from exc


def parse_timespan(value: Any) -> Any:
    """Accept HH:MM:SS (optionally D.HH:MM:SS) strings and plain seconds."""
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _timedelta(value, seconds=value)
    if isinstance(value, str):
        match = TIMESPAN_PATTERN.fullmatch(value.strip())
        if match:
            days, hours, minutes, seconds, fraction = match.groups()
            if int(minutes) > 59 or int(seconds) > 59:
                raise ValueError(f"Invalid duration '{value}'. Expected HH:MM:SS")
            return _timedelta(
                value,
                days=int(days or 0),
                hours=int(hours),
                minutes=int(minutes),
                seconds=int(seconds) + (float(f"0.{fraction}") if fraction else 0.0),
            )
    return value


def format_timespan(value: timedelta) -> str:
    total_seconds = int(value.total_seconds())
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


TimeSpan = Annotated[
    timedelta,
    BeforeValidator(parse_timespan),
    PlainSerializer(format_timespan, return_type=str),
]
RoastLevelField = Annotated[RoastLevel, BeforeValidator(RoastLevel.parse)]
BrewMethodField = Annotated[BrewMethod, BeforeValidator(BrewMethod.parse)]
EquipmentTypeField = Annotated[EquipmentType, BeforeValidator(EquipmentType.parse)]
RecordId = Annotated[int, Field(ge=SQL_INT_MIN, le=SQL_INT_MAX)]


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Entities


class CoffeeBeanIn(ApiModel):
    name: str = ""
    brand: str = ""
    roast_level: RoastLevelField
    origin: str = ""


class CoffeeBeanOut(ApiModel):
    id: int
    name: str
    brand: str
    roast_level: RoastLevel
    origin: str
    created_date: datetime
    modified_date: Optional[datetime] = None


class GrindSettingIn(ApiModel):
    grind_size: int
    grind_time: TimeSpan
    grind_weight: FiniteFloat
    grinder_type: str = ""
    notes: str = ""


class GrindSettingOut(ApiModel):
    id: int
    grind_size: int
    grind_time: TimeSpan
    grind_weight: float
    grinder_type: str
    notes: str
    created_date: datetime


class BrewingEquipmentIn(ApiModel):
    vendor: str = ""
    model: str = ""
    type: EquipmentTypeField
    specifications: dict[str, str] = Field(default_factory=dict)


class BrewingEquipmentOut(ApiModel):
    id: int
    vendor: str
    model: str
    type: EquipmentType
    specifications: dict[str, str] = Field(default_factory=dict)
    created_date: datetime


class BrewSessionIn(ApiModel):
    method: BrewMethodField
    water_temperature: FiniteFloat
    brew_time: TimeSpan
    tasting_notes: str = ""
    rating: Optional[int] = None
    is_favorite: bool = False
    coffee_bean_id: RecordId
    grind_setting_id: RecordId
    brewing_equipment_id: Optional[RecordId] = None


class BrewSessionOut(ApiModel):
    id: int
    method: BrewMethod
    water_temperature: float
    brew_time: TimeSpan
    tasting_notes: str
    rating: Optional[int] = None
    is_favorite: bool
    created_date: datetime
    coffee_bean_id: int
    grind_setting_id: int
    brewing_equipment_id: Optional[int] = None
    coffee_bean: CoffeeBeanOut
    grind_setting: GrindSettingOut
    brewing_equipment: Optional[BrewingEquipmentOut] = None


# Analytics


class BrewMethodStats(ApiModel):
    method: BrewMethod
    count: int
    average_rating: float
    favorite_count: int


class EquipmentStats(ApiModel):
    equipment_id: int
    equipment_name: str
    type: EquipmentType
    usage_count: int
    average_rating: float
    favorite_count: int


class RecentBrewSession(ApiModel):
    id: int
    method: BrewMethod
    coffee_bean_name: str
    rating: Optional[int] = None
    is_favorite: bool
    created_date: datetime


class DashboardStats(ApiModel):
    total_brew_sessions: int
    total_coffee_beans: int
    total_grind_settings: int
    total_equipment: int
    favorite_brews: int
    average_rating: float
    brew_method_stats: list[BrewMethodStats] = Field(default_factory=list)
    equipment_stats: list[EquipmentStats] = Field(default_factory=list)
    recent_brews: list[RecentBrewSession] = Field(default_factory=list)


class GrindSizeCorrelation(ApiModel):
    grind_size: int
    average_rating: float
    sample_count: int


class TemperatureCorrelation(ApiModel):
    temperature_range: float
    average_rating: float
    sample_count: int


class BrewTimeCorrelation(ApiModel):
    brew_time_range: TimeSpan
    average_rating: float
    sample_count: int


class CorrelationAnalysis(ApiModel):
    grind_size_correlations: list[GrindSizeCorrelation] = Field(default_factory=list)
    temperature_correlations: list[TemperatureCorrelation] = Field(default_factory=list)
    brew_time_correlations: list[BrewTimeCorrelation] = Field(default_factory=list)
    overall_correlation_strength: float = 0.0


class Recommendation(ApiModel):
    type: str
    title: str
    description: str
    confidence_score: float
    parameters: dict[str, Any] = Field(default_factory=dict)


class EquipmentPerformanceItem(ApiModel):
    equipment_id: int
    vendor: str
    model: str
    type: EquipmentType
    total_uses: int
    average_rating: float
    favorite_count: int
    performance_score: float


class EquipmentPerformance(ApiModel):
    equipment_performance: list[EquipmentPerformanceItem] = Field(default_factory=list)
    best_performing_equipment: Optional[EquipmentPerformanceItem] = None
    most_used_equipment: Optional[EquipmentPerformanceItem] = None


class HealthOut(ApiModel):
    status: str
    timestamp: datetime
    version: str
