"""Conversions between ORM records and API payloads.

Server-owned fields (ids and timestamps) are never read from incoming payloads;
the ``apply_*`` helpers copy only client-editable fields onto a record.
"""

from .models import BrewingEquipmentRecord, BrewSessionRecord, CoffeeBeanRecord, GrindSettingRecord
from .schemas import (
    BrewingEquipmentIn,
    BrewingEquipmentOut,
    BrewSessionIn,
    BrewSessionOut,
    CoffeeBeanIn,
    CoffeeBeanOut,
    GrindSettingIn,
    GrindSettingOut,
)


def coffee_bean_out(record: CoffeeBeanRecord) -> CoffeeBeanOut:
    return CoffeeBeanOut(
        id=record.id,
        name=record.name,
        brand=record.brand,
        roast_level=record.roast_level,
        origin=record.origin,
        created_date=record.created_date,
        modified_date=record.modified_date,
    )


def apply_coffee_bean(record: CoffeeBeanRecord, payload: CoffeeBeanIn) -> CoffeeBeanRecord:
    record.name = payload.name
    record.brand = payload.brand
    record.roast_level = payload.roast_level
    record.origin = payload.origin
    return record


def grind_setting_out(record: GrindSettingRecord) -> GrindSettingOut:
    return GrindSettingOut(
        id=record.id,
        grind_size=record.grind_size,
        grind_time=record.grind_time,
        grind_weight=record.grind_weight,
        grinder_type=record.grinder_type,
        notes=record.notes,
        created_date=record.created_date,
    )


def apply_grind_setting(record: GrindSettingRecord, payload: GrindSettingIn) -> GrindSettingRecord:
    record.grind_size = payload.grind_size
    record.grind_time = payload.grind_time
    record.grind_weight = payload.grind_weight
    record.grinder_type = payload.grinder_type
    record.notes = payload.notes
    return record


def equipment_out(record: BrewingEquipmentRecord) -> BrewingEquipmentOut:
    return BrewingEquipmentOut(
        id=record.id,
        vendor=record.vendor,
        model=record.model,
        type=record.type,
        specifications=dict(record.specifications or {}),
        created_date=record.created_date,
    )


def apply_equipment(record: BrewingEquipmentRecord, payload: BrewingEquipmentIn) -> BrewingEquipmentRecord:
    record.vendor = payload.vendor
    record.model = payload.model
    record.type = payload.type
    # a fresh dict so the JSON column registers the change
    record.specifications = dict(payload.specifications)
    return record


def brew_session_out(record: BrewSessionRecord) -> BrewSessionOut:
    return BrewSessionOut(
        id=record.id,
        method=record.method,
        water_temperature=record.water_temperature,
        brew_time=record.brew_time,
        tasting_notes=record.tasting_notes,
        rating=record.rating,
        is_favorite=record.is_favorite,
        created_date=record.created_date,
        coffee_bean_id=record.coffee_bean_id,
        grind_setting_id=record.grind_setting_id,
        brewing_equipment_id=record.brewing_equipment_id,
        coffee_bean=coffee_bean_out(record.coffee_bean),
        grind_setting=grind_setting_out(record.grind_setting),
        brewing_equipment=equipment_out(record.brewing_equipment) if record.brewing_equipment else None,
    )


def apply_brew_session(record: BrewSessionRecord, payload: BrewSessionIn) -> BrewSessionRecord:
    record.method = payload.method
    record.water_temperature = payload.water_temperature
    record.brew_time = payload.brew_time
    record.tasting_notes = payload.tasting_notes
    record.rating = payload.rating
    record.is_favorite = payload.is_favorite
    record.coffee_bean_id = payload.coffee_bean_id
    record.grind_setting_id = payload.grind_setting_id
    record.brewing_equipment_id = payload.brewing_equipment_id
    return record
