import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..exceptions import BusinessValidationError, NotFoundError, ReferentialIntegrityError
from ..mappers import apply_coffee_bean, coffee_bean_out
from ..models import CoffeeBeanRecord, RoastLevel, utcnow
from ..repositories import BrewSessionRepository, CoffeeBeanRepository
from ..schemas import CoffeeBeanIn, CoffeeBeanOut
from ..validators import raise_for_errors, validate_coffee_bean

logger = logging.getLogger("brewlog.coffee_beans")


class CoffeeBeanService:
    def __init__(self, session: Session):
        self.repository = CoffeeBeanRepository(session)
        self.brew_sessions = BrewSessionRepository(session)

    def find(
        self,
        name: Optional[str] = None,
        brand: Optional[str] = None,
        roast_level: Optional[RoastLevel] = None,
        origin: Optional[str] = None,
        created_after: Optional[datetime] = None,
        created_before: Optional[datetime] = None,
    ) -> list[CoffeeBeanOut]:
        beans = self.repository.find(
            name=name,
            brand=brand,
            roast_level=roast_level,
            origin=origin,
            created_after=created_after,
            created_before=created_before,
        )
        return [coffee_bean_out(bean) for bean in beans]

    def _get_record(self, bean_id: int) -> CoffeeBeanRecord:
        bean = self.repository.get(bean_id)
        if bean is None:
            raise NotFoundError("CoffeeBean", bean_id)
        return bean

    def get(self, bean_id: int) -> CoffeeBeanOut:
        return coffee_bean_out(self._get_record(bean_id))

    def _ensure_unique(self, payload: CoffeeBeanIn, exclude_id: Optional[int] = None) -> None:
        candidates = self.repository.find(brand=payload.brand, name=payload.name)
        for bean in candidates:
            if bean.id != exclude_id and bean.name.lower() == payload.name.lower():
                raise BusinessValidationError(
                    f"A coffee bean with name '{payload.name}' from brand '{payload.brand}' already exists."
                )

    def create(self, payload: CoffeeBeanIn) -> CoffeeBeanOut:
        raise_for_errors(validate_coffee_bean(payload))
        self._ensure_unique(payload)

        bean = apply_coffee_bean(CoffeeBeanRecord(created_date=utcnow()), payload)
        bean = self.repository.add(bean)
        logger.info("Created coffee bean id=%s name=%s", bean.id, bean.name)
        return coffee_bean_out(bean)

    def update(self, bean_id: int, payload: CoffeeBeanIn) -> CoffeeBeanOut:
        raise_for_errors(validate_coffee_bean(payload))
        bean = self._get_record(bean_id)
        self._ensure_unique(payload, exclude_id=bean_id)

        apply_coffee_bean(bean, payload)
        bean.modified_date = utcnow()
        bean = self.repository.save(bean)
        logger.info("Updated coffee bean id=%s", bean.id)
        return coffee_bean_out(bean)

    def delete(self, bean_id: int) -> None:
        bean = self._get_record(bean_id)
        references = self.brew_sessions.count_referencing(coffee_bean_id=bean_id)
        if references:
            raise ReferentialIntegrityError(
                f"Cannot delete coffee bean '{bean.name}' because it is referenced by {references} "
                "brew session(s). Please delete the associated brew sessions first."
            )
        self.repository.delete(bean)
        logger.info("Deleted coffee bean id=%s", bean_id)

    def recently_added(self, count: int = 10) -> list[CoffeeBeanOut]:
        return [coffee_bean_out(bean) for bean in self.repository.recently_added(count)]

    def most_used(self, count: int = 10) -> list[CoffeeBeanOut]:
        return [coffee_bean_out(bean) for bean in self.repository.most_used(count)]
