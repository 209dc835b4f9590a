"""Input validation for BrewLog payloads.

Each ``validate_*`` function returns the list of field errors it found; an empty
list means the payload is acceptable. Business rules that need the database or
span several fields live in the services.
"""

from datetime import timedelta

from .exceptions import BusinessValidationError, FieldError, FieldValidationError
from .models import BrewMethod, EquipmentType
from .schemas import BrewingEquipmentIn, BrewSessionIn, CoffeeBeanIn, GrindSettingIn

MIN_COUNT = 1
MAX_COUNT = 100
MAX_SPECIFICATIONS = 20
VALID_BURR_TYPES = ("ceramic", "steel", "conical", "flat")

# Inclusive water temperature (°C) and brew time ranges per method.
TEMPERATURE_RANGES = {
    BrewMethod.ESPRESSO: (88.0, 96.0),
    BrewMethod.FRENCH_PRESS: (92.0, 96.0),
    BrewMethod.POUR_OVER: (90.0, 96.0),
    BrewMethod.DRIP: (90.0, 96.0),
    BrewMethod.AEROPRESS: (80.0, 95.0),
    BrewMethod.COLD_BREW: (4.0, 25.0),
}
DEFAULT_TEMPERATURE_RANGE = (80.0, 100.0)

BREW_TIME_RANGES = {
    BrewMethod.ESPRESSO: (timedelta(seconds=20), timedelta(seconds=40)),
    BrewMethod.FRENCH_PRESS: (timedelta(minutes=3), timedelta(minutes=5)),
    BrewMethod.POUR_OVER: (timedelta(minutes=2), timedelta(minutes=6)),
    BrewMethod.DRIP: (timedelta(minutes=4), timedelta(minutes=8)),
    BrewMethod.AEROPRESS: (timedelta(minutes=1), timedelta(minutes=3)),
    BrewMethod.COLD_BREW: (timedelta(hours=8), timedelta(hours=24)),
}
DEFAULT_BREW_TIME_RANGE = (timedelta(seconds=30), timedelta(hours=24))

_METHOD_TEMPERATURE_MESSAGES = {
    BrewMethod.ESPRESSO: "Espresso water temperature should be between 88°C and 96°C",
    BrewMethod.POUR_OVER: "Pour over water temperature should be between 90°C and 96°C",
    BrewMethod.FRENCH_PRESS: "French press water temperature should be between 92°C and 96°C",
    BrewMethod.COLD_BREW: "Cold brew water temperature should be between 4°C and 25°C",
}
_METHOD_TIME_MESSAGES = {
    BrewMethod.ESPRESSO: "Espresso brew time should be between 20 and 40 seconds",
    BrewMethod.POUR_OVER: "Pour over brew time should be between 2 and 6 minutes",
    BrewMethod.FRENCH_PRESS: "French press brew time should be between 3 and 5 minutes",
    BrewMethod.COLD_BREW: "Cold brew time should be between 8 and 24 hours",
}


def temperature_range_for(method: BrewMethod) -> tuple[float, float]:
    return TEMPERATURE_RANGES.get(method, DEFAULT_TEMPERATURE_RANGE)


def brew_time_range_for(method: BrewMethod) -> tuple[timedelta, timedelta]:
    return BREW_TIME_RANGES.get(method, DEFAULT_BREW_TIME_RANGE)


def _required_text(errors: list[FieldError], field: str, value: str, label: str, max_length: int) -> None:
    if not value or not value.strip():
        errors.append(FieldError(field, f"{label} is required"))
    elif len(value) > max_length:
        errors.append(FieldError(field, f"{label} cannot exceed {max_length} characters"))


def raise_for_errors(errors: list[FieldError]) -> None:
    if errors:
        raise BusinessValidationError("Validation failed: " + ", ".join(error.message for error in errors))


def check_count(count: int) -> int:
    errors = validate_count(count)
    if errors:
        raise FieldValidationError(errors, errors[0].message)
    return count


def validate_count(count: int) -> list[FieldError]:
    if count < MIN_COUNT or count > MAX_COUNT:
        return [FieldError("count", f"Count must be between {MIN_COUNT} and {MAX_COUNT}")]
    return []


def validate_coffee_bean(payload: CoffeeBeanIn) -> list[FieldError]:
    errors: list[FieldError] = []
    _required_text(errors, "name", payload.name, "Coffee bean name", 100)
    _required_text(errors, "brand", payload.brand, "Brand", 100)
    _required_text(errors, "origin", payload.origin, "Origin", 200)
    return errors


def validate_grind_setting(payload: GrindSettingIn) -> list[FieldError]:
    errors: list[FieldError] = []

    if not 1 <= payload.grind_size <= 30:
        errors.append(FieldError("grindSize", "Grind size must be between 1 and 30"))

    if payload.grind_time <= timedelta(0):
        errors.append(FieldError("grindTime", "Grind time must be greater than zero"))
    elif payload.grind_time > timedelta(minutes=10):
        errors.append(FieldError("grindTime", "Grind time cannot exceed 10 minutes"))

    if payload.grind_weight <= 0:
        errors.append(FieldError("grindWeight", "Grind weight must be greater than zero"))
    elif payload.grind_weight > 1000:
        errors.append(FieldError("grindWeight", "Grind weight cannot exceed 1000 grams"))

    _required_text(errors, "grinderType", payload.grinder_type, "Grinder type", 100)

    if len(payload.notes) > 500:
        errors.append(FieldError("notes", "Notes cannot exceed 500 characters"))
    return errors


def _has_valid_pressure(specifications: dict[str, str]) -> bool:
    if "Pressure" not in specifications:
        return True
    pressure = specifications["Pressure"]
    return bool(pressure.strip()) and "bar" in pressure.lower()


def _has_valid_burr_type(specifications: dict[str, str]) -> bool:
    if "BurrType" not in specifications:
        return True
    burr_type = specifications["BurrType"].lower()
    return bool(burr_type.strip()) and any(valid in burr_type for valid in VALID_BURR_TYPES)


def validate_equipment(payload: BrewingEquipmentIn) -> list[FieldError]:
    errors: list[FieldError] = []
    _required_text(errors, "vendor", payload.vendor, "Vendor", 100)
    _required_text(errors, "model", payload.model, "Model", 100)

    specifications = payload.specifications
    if len(specifications) > MAX_SPECIFICATIONS:
        errors.append(
            FieldError("specifications", f"Cannot have more than {MAX_SPECIFICATIONS} specifications")
        )

    if not all(
        key.strip() and value.strip() and len(key) <= 100 and len(value) <= 100
        for key, value in specifications.items()
    ):
        errors.append(
            FieldError(
                "specifications",
                "Specification keys and values must not be empty and cannot exceed 100 characters each",
            )
        )

    if payload.type == EquipmentType.ESPRESSO_MACHINE and not _has_valid_pressure(specifications):
        errors.append(
            FieldError(
                "specifications",
                "Espresso machines should have a valid 'Pressure' specification (e.g., '9 bar', '15 bar')",
            )
        )

    if payload.type == EquipmentType.GRINDER and not _has_valid_burr_type(specifications):
        errors.append(
            FieldError(
                "specifications",
                "Grinders should have a 'BurrType' specification (e.g., 'Ceramic', 'Steel')",
            )
        )
    return errors


def validate_brew_session(payload: BrewSessionIn) -> list[FieldError]:
    errors: list[FieldError] = []

    if payload.water_temperature <= 0:
        errors.append(FieldError("waterTemperature", "Water temperature must be greater than 0"))
    elif payload.water_temperature > 100:
        errors.append(FieldError("waterTemperature", "Water temperature cannot exceed 100°C"))

    if payload.method in _METHOD_TEMPERATURE_MESSAGES:
        low, high = TEMPERATURE_RANGES[payload.method]
        if not low <= payload.water_temperature <= high:
            errors.append(FieldError("waterTemperature", _METHOD_TEMPERATURE_MESSAGES[payload.method]))

    if payload.brew_time <= timedelta(0):
        errors.append(FieldError("brewTime", "Brew time must be greater than zero"))
    elif payload.brew_time > timedelta(hours=24):
        errors.append(FieldError("brewTime", "Brew time cannot exceed 24 hours"))

    if payload.method in _METHOD_TIME_MESSAGES:
        shortest, longest = BREW_TIME_RANGES[payload.method]
        if not shortest <= payload.brew_time <= longest:
            errors.append(FieldError("brewTime", _METHOD_TIME_MESSAGES[payload.method]))

    if len(payload.tasting_notes) > 1000:
        errors.append(FieldError("tastingNotes", "Tasting notes cannot exceed 1000 characters"))

    if payload.rating is not None and not 1 <= payload.rating <= 10:
        errors.append(FieldError("rating", "Rating must be between 1 and 10"))

    if payload.coffee_bean_id <= 0:
        errors.append(FieldError("coffeeBeanId", "Coffee bean ID must be greater than 0"))
    if payload.grind_setting_id <= 0:
        errors.append(FieldError("grindSettingId", "Grind setting ID must be greater than 0"))
    if payload.brewing_equipment_id is not None and payload.brewing_equipment_id <= 0:
        errors.append(FieldError("brewingEquipmentId", "Brewing equipment ID must be greater than 0"))
    return errors
