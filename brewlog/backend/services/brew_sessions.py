import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..exceptions import BusinessValidationError, NotFoundError
from ..mappers import apply_brew_session, brew_session_out
from ..models import BrewMethod, BrewSessionRecord, utcnow
from ..repositories import (
    BrewingEquipmentRepository,
    BrewSessionRepository,
    CoffeeBeanRepository,
    GrindSettingRepository,
)
from ..schemas import BrewSessionIn, BrewSessionOut
from ..validators import brew_time_range_for, raise_for_errors, temperature_range_for, validate_brew_session

logger = logging.getLogger("brewlog.brew_sessions")


def _degrees(value: float) -> str:
    return f"{value:g}"


def check_brewing_parameters(payload: BrewSessionIn) -> None:
    low, high = temperature_range_for(payload.method)
    if not low <= payload.water_temperature <= high:
        raise BusinessValidationError(
            f"Water temperature for {payload.method.value} should be between "
            f"{_degrees(low)}°C and {_degrees(high)}°C."
        )

    if payload.brew_time.total_seconds() <= 0:
        raise BusinessValidationError("Brew time must be greater than 0.")

    shortest, longest = brew_time_range_for(payload.method)
    if not shortest <= payload.brew_time <= longest:
        raise BusinessValidationError(
            f"Brew time for {payload.method.value} should be between "
            f"{shortest.total_seconds() / 60:.1f} and {longest.total_seconds() / 60:.1f} minutes."
        )


class BrewSessionService:
    def __init__(self, session: Session):
        self.repository = BrewSessionRepository(session)
        self.coffee_beans = CoffeeBeanRepository(session)
        self.grind_settings = GrindSettingRepository(session)
        self.equipment = BrewingEquipmentRepository(session)

    def find(
        self,
        method: Optional[BrewMethod] = None,
        coffee_bean_id: Optional[int] = None,
        grind_setting_id: Optional[int] = None,
        brewing_equipment_id: Optional[int] = None,
        min_water_temperature: Optional[float] = None,
        max_water_temperature: Optional[float] = None,
        min_rating: Optional[int] = None,
        max_rating: Optional[int] = None,
        is_favorite: Optional[bool] = None,
        created_after: Optional[datetime] = None,
        created_before: Optional[datetime] = None,
    ) -> list[BrewSessionOut]:
        sessions = self.repository.find(
            method=method,
            coffee_bean_id=coffee_bean_id,
            grind_setting_id=grind_setting_id,
            brewing_equipment_id=brewing_equipment_id,
            min_water_temperature=min_water_temperature,
            max_water_temperature=max_water_temperature,
            min_rating=min_rating,
            max_rating=max_rating,
            is_favorite=is_favorite,
            created_after=created_after,
            created_before=created_before,
        )
        return [brew_session_out(item) for item in sessions]

    def _get_record(self, session_id: int) -> BrewSessionRecord:
        record = self.repository.get_with_related(session_id)
        if record is None:
            raise NotFoundError("BrewSession", session_id)
        return record

    def get(self, session_id: int) -> BrewSessionOut:
        return brew_session_out(self._get_record(session_id))

    def _check_references(self, payload: BrewSessionIn) -> None:
        if not self.coffee_beans.exists(payload.coffee_bean_id):
            raise BusinessValidationError(f"Coffee bean with ID {payload.coffee_bean_id} does not exist.")
        if not self.grind_settings.exists(payload.grind_setting_id):
            raise BusinessValidationError(f"Grind setting with ID {payload.grind_setting_id} does not exist.")
        if payload.brewing_equipment_id is not None and not self.equipment.exists(payload.brewing_equipment_id):
            raise BusinessValidationError(
                f"Brewing equipment with ID {payload.brewing_equipment_id} does not exist."
            )

    def _validate(self, payload: BrewSessionIn) -> None:
        raise_for_errors(validate_brew_session(payload))
        self._check_references(payload)
        check_brewing_parameters(payload)

    def create(self, payload: BrewSessionIn) -> BrewSessionOut:
        self._validate(payload)

        record = apply_brew_session(BrewSessionRecord(created_date=utcnow()), payload)
        record = self.repository.add(record)
        logger.info("Created brew session id=%s method=%s", record.id, record.method.value)
        return self.get(record.id)

    def update(self, session_id: int, payload: BrewSessionIn) -> BrewSessionOut:
        raise_for_errors(validate_brew_session(payload))
        record = self._get_record(session_id)
        self._check_references(payload)
        check_brewing_parameters(payload)

        apply_brew_session(record, payload)
        self.repository.save(record)
        logger.info("Updated brew session id=%s", session_id)
        return self.get(session_id)

    def delete(self, session_id: int) -> None:
        record = self.repository.get(session_id)
        if record is None:
            raise NotFoundError("BrewSession", session_id)
        self.repository.delete(record)
        logger.info("Deleted brew session id=%s", session_id)

    def toggle_favorite(self, session_id: int) -> BrewSessionOut:
        record = self._get_record(session_id)
        record.is_favorite = not record.is_favorite
        self.repository.save(record)
        logger.info("Brew session id=%s favorite=%s", session_id, record.is_favorite)
        return brew_session_out(record)

    def favorites(self) -> list[BrewSessionOut]:
        return [brew_session_out(item) for item in self.repository.favorites()]

    def recent(self, count: int = 10) -> list[BrewSessionOut]:
        return [brew_session_out(item) for item in self.repository.recent(count)]

    def top_rated(self, count: int = 10) -> list[BrewSessionOut]:
        return [brew_session_out(item) for item in self.repository.top_rated(count)]
