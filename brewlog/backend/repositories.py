from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from .models import (
    BrewingEquipmentRecord,
    BrewMethod,
    BrewSessionRecord,
    CoffeeBeanRecord,
    EquipmentType,
    GrindSettingRecord,
    RoastLevel,
)


def _contains(column, text: Optional[str]):
    return func.lower(column).contains(text.strip().lower(), autoescape=True)


def _has_text(text: Optional[str]) -> bool:
    return bool(text and text.strip())


class Repository:
    record_class = None

    def __init__(self, session: Session):
        self.session = session

    def get(self, record_id: int):
        return self.session.get(self.record_class, record_id)

    def exists(self, record_id: int) -> bool:
        statement = select(self.record_class.id).where(self.record_class.id == record_id)
        return self.session.execute(statement).first() is not None

    def count(self) -> int:
        return self.session.execute(select(func.count()).select_from(self.record_class)).scalar_one()

    def add(self, record):
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        return record

    def save(self, record):
        self.session.commit()
        self.session.refresh(record)
        return record

    def delete(self, record) -> None:
        self.session.delete(record)
        self.session.commit()

    def _created_between(self, statement, created_after: Optional[datetime], created_before: Optional[datetime]):
        if created_after is not None:
            statement = statement.where(self.record_class.created_date >= created_after)
        if created_before is not None:
            statement = statement.where(self.record_class.created_date <= created_before)
        return statement

    def _most_used(self, foreign_key, count: int):
        usage = func.count(BrewSessionRecord.id)
        statement = (
            select(self.record_class)
            .outerjoin(BrewSessionRecord, foreign_key == self.record_class.id)
            .group_by(self.record_class.id)
            .order_by(usage.desc(), self.record_class.id)
            .limit(count)
        )
        return list(self.session.execute(statement).scalars().all())


class CoffeeBeanRepository(Repository):
    record_class = CoffeeBeanRecord

    def find(
        self,
        name: Optional[str] = None,
        brand: Optional[str] = None,
        roast_level: Optional[RoastLevel] = None,
        origin: Optional[str] = None,
        created_after: Optional[datetime] = None,
        created_before: Optional[datetime] = None,
    ) -> list[CoffeeBeanRecord]:
        statement = select(CoffeeBeanRecord)
        if _has_text(name):
            statement = statement.where(_contains(CoffeeBeanRecord.name, name))
        if _has_text(brand):
            statement = statement.where(_contains(CoffeeBeanRecord.brand, brand))
        if roast_level is not None:
            statement = statement.where(CoffeeBeanRecord.roast_level == roast_level)
        if _has_text(origin):
            statement = statement.where(_contains(CoffeeBeanRecord.origin, origin))
        statement = self._created_between(statement, created_after, created_before)
        statement = statement.order_by(CoffeeBeanRecord.name)
        return list(self.session.execute(statement).scalars().all())

    def recently_added(self, count: int) -> list[CoffeeBeanRecord]:
        statement = (
            select(CoffeeBeanRecord)
            .order_by(CoffeeBeanRecord.created_date.desc(), CoffeeBeanRecord.id.desc())
            .limit(count)
        )
        return list(self.session.execute(statement).scalars().all())

    def most_used(self, count: int) -> list[CoffeeBeanRecord]:
        return self._most_used(BrewSessionRecord.coffee_bean_id, count)


class GrindSettingRepository(Repository):
    record_class = GrindSettingRecord

    def find(
        self,
        min_grind_size: Optional[int] = None,
        max_grind_size: Optional[int] = None,
        grinder_type: Optional[str] = None,
        min_grind_weight: Optional[float] = None,
        max_grind_weight: Optional[float] = None,
        created_after: Optional[datetime] = None,
        created_before: Optional[datetime] = None,
    ) -> list[GrindSettingRecord]:
        statement = select(GrindSettingRecord)
        if _has_text(grinder_type):
            statement = statement.where(_contains(GrindSettingRecord.grinder_type, grinder_type))
        if min_grind_size is not None:
            statement = statement.where(GrindSettingRecord.grind_size >= min_grind_size)
        if max_grind_size is not None:
            statement = statement.where(GrindSettingRecord.grind_size <= max_grind_size)
        if min_grind_weight is not None:
            statement = statement.where(GrindSettingRecord.grind_weight >= min_grind_weight)
        if max_grind_weight is not None:
            statement = statement.where(GrindSettingRecord.grind_weight <= max_grind_weight)
        statement = self._created_between(statement, created_after, created_before)
        statement = statement.order_by(GrindSettingRecord.grind_size, GrindSettingRecord.id)
        return list(self.session.execute(statement).scalars().all())

    def recently_used(self, count: int) -> list[GrindSettingRecord]:
        last_used = func.max(BrewSessionRecord.created_date)
        statement = (
            select(GrindSettingRecord)
            .join(BrewSessionRecord, BrewSessionRecord.grind_setting_id == GrindSettingRecord.id)
            .group_by(GrindSettingRecord.id)
            .order_by(last_used.desc())
            .limit(count)
        )
        return list(self.session.execute(statement).scalars().all())

    def most_used(self, count: int) -> list[GrindSettingRecord]:
        return self._most_used(BrewSessionRecord.grind_setting_id, count)

    def grinder_types(self) -> list[str]:
        statement = select(GrindSettingRecord.grinder_type).distinct().order_by(GrindSettingRecord.grinder_type)
        return list(self.session.execute(statement).scalars().all())


class BrewingEquipmentRepository(Repository):
    record_class = BrewingEquipmentRecord

    def find(
        self,
        type: Optional[EquipmentType] = None,
        vendor: Optional[str] = None,
        model: Optional[str] = None,
        created_after: Optional[datetime] = None,
        created_before: Optional[datetime] = None,
    ) -> list[BrewingEquipmentRecord]:
        statement = select(BrewingEquipmentRecord)
        if type is not None:
            statement = statement.where(BrewingEquipmentRecord.type == type)
        if _has_text(vendor):
            statement = statement.where(_contains(BrewingEquipmentRecord.vendor, vendor))
        if _has_text(model):
            statement = statement.where(_contains(BrewingEquipmentRecord.model, model))
        statement = self._created_between(statement, created_after, created_before)
        statement = statement.order_by(BrewingEquipmentRecord.vendor, BrewingEquipmentRecord.model)
        return list(self.session.execute(statement).scalars().all())

    def find_by_vendor_and_model(self, vendor: str, model: str) -> list[BrewingEquipmentRecord]:
        statement = select(BrewingEquipmentRecord).where(
            func.lower(BrewingEquipmentRecord.vendor) == vendor.strip().lower(),
            func.lower(BrewingEquipmentRecord.model) == model.strip().lower(),
        )
        return list(self.session.execute(statement).scalars().all())

    def most_used(self, count: int) -> list[BrewingEquipmentRecord]:
        return self._most_used(BrewSessionRecord.brewing_equipment_id, count)

    def vendors(self) -> list[str]:
        statement = select(BrewingEquipmentRecord.vendor).distinct().order_by(BrewingEquipmentRecord.vendor)
        return list(self.session.execute(statement).scalars().all())

    def models(self) -> list[str]:
        statement = select(BrewingEquipmentRecord.model).distinct().order_by(BrewingEquipmentRecord.model)
        return list(self.session.execute(statement).scalars().all())


class BrewSessionRepository(Repository):
    record_class = BrewSessionRecord

    def _with_related(self):
        return select(BrewSessionRecord).options(
            selectinload(BrewSessionRecord.coffee_bean),
            selectinload(BrewSessionRecord.grind_setting),
            selectinload(BrewSessionRecord.brewing_equipment),
        )

    def _newest_first(self, statement):
        return statement.order_by(BrewSessionRecord.created_date.desc(), BrewSessionRecord.id.desc())

    def get_with_related(self, session_id: int) -> Optional[BrewSessionRecord]:
        statement = self._with_related().where(BrewSessionRecord.id == session_id)
        return self.session.execute(statement).scalar_one_or_none()

    def all_with_related(self) -> list[BrewSessionRecord]:
        statement = self._newest_first(self._with_related())
        return list(self.session.execute(statement).scalars().all())

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
    ) -> list[BrewSessionRecord]:
        statement = self._with_related()
        if method is not None:
            statement = statement.where(BrewSessionRecord.method == method)
        if coffee_bean_id is not None:
            statement = statement.where(BrewSessionRecord.coffee_bean_id == coffee_bean_id)
        if grind_setting_id is not None:
            statement = statement.where(BrewSessionRecord.grind_setting_id == grind_setting_id)
        if brewing_equipment_id is not None:
            statement = statement.where(BrewSessionRecord.brewing_equipment_id == brewing_equipment_id)
        if min_water_temperature is not None:
            statement = statement.where(BrewSessionRecord.water_temperature >= min_water_temperature)
        if max_water_temperature is not None:
            statement = statement.where(BrewSessionRecord.water_temperature <= max_water_temperature)
        if min_rating is not None:
            statement = statement.where(BrewSessionRecord.rating.is_not(None), BrewSessionRecord.rating >= min_rating)
        if max_rating is not None:
            statement = statement.where(BrewSessionRecord.rating.is_not(None), BrewSessionRecord.rating <= max_rating)
        if is_favorite is not None:
            statement = statement.where(BrewSessionRecord.is_favorite == is_favorite)
        statement = self._created_between(statement, created_after, created_before)
        return list(self.session.execute(self._newest_first(statement)).scalars().all())

    def favorites(self) -> list[BrewSessionRecord]:
        statement = self._with_related().where(BrewSessionRecord.is_favorite.is_(True))
        return list(self.session.execute(self._newest_first(statement)).scalars().all())

    def recent(self, count: int) -> list[BrewSessionRecord]:
        statement = self._newest_first(self._with_related()).limit(count)
        return list(self.session.execute(statement).scalars().all())

    def top_rated(self, count: int) -> list[BrewSessionRecord]:
        statement = (
            self._with_related()
            .where(BrewSessionRecord.rating.is_not(None))
            .order_by(
                BrewSessionRecord.rating.desc(),
                BrewSessionRecord.created_date.desc(),
                BrewSessionRecord.id.desc(),
            )
            .limit(count)
        )
        return list(self.session.execute(statement).scalars().all())

    def count_referencing(
        self,
        coffee_bean_id: Optional[int] = None,
        grind_setting_id: Optional[int] = None,
        brewing_equipment_id: Optional[int] = None,
    ) -> int:
        statement = select(func.count(BrewSessionRecord.id))
        if coffee_bean_id is not None:
            statement = statement.where(BrewSessionRecord.coffee_bean_id == coffee_bean_id)
        if grind_setting_id is not None:
            statement = statement.where(BrewSessionRecord.grind_setting_id == grind_setting_id)
        if brewing_equipment_id is not None:
            statement = statement.where(BrewSessionRecord.brewing_equipment_id == brewing_equipment_id)
        return self.session.execute(statement).scalar_one()
