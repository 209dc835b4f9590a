import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..exceptions import BusinessValidationError, NotFoundError, ReferentialIntegrityError
from ..mappers import apply_equipment, equipment_out
from ..models import BrewingEquipmentRecord, EquipmentType, utcnow
from ..repositories import BrewingEquipmentRepository, BrewSessionRepository
from ..schemas import BrewingEquipmentIn, BrewingEquipmentOut
from ..validators import raise_for_errors, validate_equipment

logger = logging.getLogger("brewlog.equipment")


def _number(raw: str) -> Optional[float]:
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


def _require_positive(specs: dict[str, str], key: str, message: str) -> None:
    if key in specs:
        value = _number(specs[key])
        if value is None or value <= 0:
            raise BusinessValidationError(message)


def _require_text(specs: dict[str, str], key: str, message: str) -> None:
    if key in specs and not specs[key].strip():
        raise BusinessValidationError(message)


def check_specifications(equipment_type: EquipmentType, specs: dict[str, str]) -> None:
    """Soft per-type checks on the free-form specification map."""
    if equipment_type == EquipmentType.ESPRESSO_MACHINE:
        if "BarPressure" in specs:
            pressure = _number(specs["BarPressure"])
            if pressure is None or pressure <= 0 or pressure > 20:
                raise BusinessValidationError("Bar pressure must be a positive number between 0 and 20.")
        _require_positive(specs, "BoilerCapacity", "Boiler capacity must be a positive number.")
    elif equipment_type == EquipmentType.GRINDER:
        _require_text(specs, "BurrType", "Burr type cannot be empty.")
        _require_positive(specs, "MotorPower", "Motor power must be a positive number.")
    elif equipment_type == EquipmentType.FRENCH_PRESS:
        _require_positive(specs, "Capacity", "Capacity must be a positive number.")
        _require_text(specs, "Material", "Material cannot be empty.")
    elif equipment_type in (EquipmentType.POUR_OVER_SETUP, EquipmentType.AEROPRESS):
        _require_text(specs, "FilterType", "Filter type cannot be empty.")
        _require_text(specs, "Material", "Material cannot be empty.")
    elif equipment_type == EquipmentType.DRIP_MACHINE:
        _require_positive(specs, "Capacity", "Capacity must be a positive number.")
        if "BrewTemperature" in specs:
            temperature = _number(specs["BrewTemperature"])
            if temperature is None or temperature < 80 or temperature > 100:
                raise BusinessValidationError("Brew temperature must be between 80 and 100 degrees Celsius.")


class BrewingEquipmentService:
    def __init__(self, session: Session):
        self.repository = BrewingEquipmentRepository(session)
        self.brew_sessions = BrewSessionRepository(session)

    def find(
        self,
        type: Optional[EquipmentType] = None,
        vendor: Optional[str] = None,
        model: Optional[str] = None,
        created_after: Optional[datetime] = None,
        created_before: Optional[datetime] = None,
    ) -> list[BrewingEquipmentOut]:
        equipment = self.repository.find(
            type=type,
            vendor=vendor,
            model=model,
            created_after=created_after,
            created_before=created_before,
        )
        return [equipment_out(item) for item in equipment]

    def _get_record(self, equipment_id: int) -> BrewingEquipmentRecord:
        equipment = self.repository.get(equipment_id)
        if equipment is None:
            raise NotFoundError("BrewingEquipment", equipment_id)
        return equipment

    def get(self, equipment_id: int) -> BrewingEquipmentOut:
        return equipment_out(self._get_record(equipment_id))

    def _ensure_unique(self, payload: BrewingEquipmentIn, exclude_id: Optional[int] = None) -> None:
        duplicates = self.repository.find_by_vendor_and_model(payload.vendor, payload.model)
        if any(item.id != exclude_id for item in duplicates):
            raise BusinessValidationError(
                f"Equipment with vendor '{payload.vendor}' and model '{payload.model}' already exists."
            )

    def create(self, payload: BrewingEquipmentIn) -> BrewingEquipmentOut:
        raise_for_errors(validate_equipment(payload))
        self._ensure_unique(payload)
        check_specifications(payload.type, payload.specifications)

        equipment = apply_equipment(BrewingEquipmentRecord(created_date=utcnow()), payload)
        equipment = self.repository.add(equipment)
        logger.info("Created equipment id=%s %s", equipment.id, equipment.display_name)
        return equipment_out(equipment)

    def update(self, equipment_id: int, payload: BrewingEquipmentIn) -> BrewingEquipmentOut:
        raise_for_errors(validate_equipment(payload))
        equipment = self._get_record(equipment_id)
        self._ensure_unique(payload, exclude_id=equipment_id)
        check_specifications(payload.type, payload.specifications)

        apply_equipment(equipment, payload)
        equipment = self.repository.save(equipment)
        logger.info("Updated equipment id=%s", equipment.id)
        return equipment_out(equipment)

    def delete(self, equipment_id: int) -> None:
        equipment = self._get_record(equipment_id)
        references = self.brew_sessions.count_referencing(brewing_equipment_id=equipment_id)
        if references:
            raise ReferentialIntegrityError(
                f"Cannot delete equipment '{equipment.display_name}' because it is referenced by {references} "
                "brew session(s). Please delete the associated brew sessions first."
            )
        self.repository.delete(equipment)
        logger.info("Deleted equipment id=%s", equipment_id)

    def most_used(self, count: int = 10) -> list[BrewingEquipmentOut]:
        return [equipment_out(item) for item in self.repository.most_used(count)]

    def vendors(self) -> list[str]:
        return self.repository.vendors()

    def models(self) -> list[str]:
        return self.repository.models()
