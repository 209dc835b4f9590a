import enum
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import JSON, Boolean, DateTime, Enum, Float, ForeignKey, Integer, Interval, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class LookupEnum(str, enum.Enum):
    """Enum that reads a case-insensitive name or a zero-based ordinal."""

    @classmethod
    def accepted_values(cls) -> str:
        return ", ".join(member.value for member in cls)

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            members = list(cls)
            if 0 <= value < len(members):
                return members[value]
        elif isinstance(value, str):
            text = value.strip()
            if text.lstrip("-").isdigit():
                return cls.parse(int(text))
            for member in cls:
                if member.value.lower() == text.lower():
                    return member
        raise ValueError(f"Invalid {cls.__name__}. Accepted values: {cls.accepted_values()}")


class RoastLevel(LookupEnum):
    LIGHT = "Light"
    MEDIUM_LIGHT = "MediumLight"
    MEDIUM = "Medium"
    MEDIUM_DARK = "MediumDark"
    DARK = "Dark"


class BrewMethod(LookupEnum):
    ESPRESSO = "Espresso"
    FRENCH_PRESS = "FrenchPress"
    POUR_OVER = "PourOver"
    DRIP = "Drip"
    AEROPRESS = "AeroPress"
    COLD_BREW = "ColdBrew"


class EquipmentType(LookupEnum):
    ESPRESSO_MACHINE = "EspressoMachine"
    GRINDER = "Grinder"
    FRENCH_PRESS = "FrenchPress"
    POUR_OVER_SETUP = "PourOverSetup"
    DRIP_MACHINE = "DripMachine"
    AEROPRESS = "AeroPress"


class Base(DeclarativeBase):
    pass


class CoffeeBeanRecord(Base):
    __tablename__ = "coffee_beans"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    brand: Mapped[str] = mapped_column(String(100), nullable=False)
    roast_level: Mapped[RoastLevel] = mapped_column(Enum(RoastLevel, name="roast_level"), nullable=False)
    origin: Mapped[str] = mapped_column(String(200), default="", nullable=False)
    created_date: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    modified_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    brew_sessions: Mapped[list["BrewSessionRecord"]] = relationship(
        back_populates="coffee_bean", passive_deletes=True
    )

    @property
    def display_name(self) -> str:
        return f"{self.brand} {self.name}"


class GrindSettingRecord(Base):
    __tablename__ = "grind_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    grind_size: Mapped[int] = mapped_column(Integer, nullable=False)
    grind_time: Mapped[timedelta] = mapped_column(Interval, nullable=False)
    grind_weight: Mapped[float] = mapped_column(Float, nullable=False)
    grinder_type: Mapped[str] = mapped_column(String(100), nullable=False)
    notes: Mapped[str] = mapped_column(Text, default="", nullable=False)
    created_date: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    brew_sessions: Mapped[list["BrewSessionRecord"]] = relationship(
        back_populates="grind_setting", passive_deletes=True
    )


class BrewingEquipmentRecord(Base):
    __tablename__ = "brewing_equipment"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    vendor: Mapped[str] = mapped_column(String(100), nullable=False)
    model: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[EquipmentType] = mapped_column(Enum(EquipmentType, name="equipment_type"), nullable=False)
    specifications: Mapped[dict[str, str]] = mapped_column(JSON, default=dict, nullable=False)
    created_date: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    brew_sessions: Mapped[list["BrewSessionRecord"]] = relationship(
        back_populates="brewing_equipment", passive_deletes=True
    )

    @property
    def display_name(self) -> str:
        return f"{self.vendor} {self.model}"


class BrewSessionRecord(Base):
    __tablename__ = "brew_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    method: Mapped[BrewMethod] = mapped_column(Enum(BrewMethod, name="brew_method"), nullable=False)
    water_temperature: Mapped[float] = mapped_column(Float, nullable=False)
    brew_time: Mapped[timedelta] = mapped_column(Interval, nullable=False)
    tasting_notes: Mapped[str] = mapped_column(Text, default="", nullable=False)
    rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_favorite: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_date: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False, index=True)

    coffee_bean_id: Mapped[int] = mapped_column(ForeignKey("coffee_beans.id"), nullable=False, index=True)
    grind_setting_id: Mapped[int] = mapped_column(ForeignKey("grind_settings.id"), nullable=False, index=True)
    brewing_equipment_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("brewing_equipment.id"), nullable=True, index=True
    )

    coffee_bean: Mapped[CoffeeBeanRecord] = relationship(back_populates="brew_sessions")
    grind_setting: Mapped[GrindSettingRecord] = relationship(back_populates="brew_sessions")
    brewing_equipment: Mapped[Optional[BrewingEquipmentRecord]] = relationship(back_populates="brew_sessions")
