import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..exceptions import NotFoundError, ReferentialIntegrityError
from ..mappers import apply_grind_setting, grind_setting_out
from ..models import GrindSettingRecord, utcnow
from ..repositories import BrewSessionRepository, GrindSettingRepository
from ..schemas import GrindSettingIn, GrindSettingOut
from ..validators import raise_for_errors, validate_grind_setting

logger = logging.getLogger("brewlog.grind_settings")


class GrindSettingService:
    def __init__(self, session: Session):
        self.repository = GrindSettingRepository(session)
        self.brew_sessions = BrewSessionRepository(session)

    def find(
        self,
        min_grind_size: Optional[int] = None,
        max_grind_size: Optional[int] = None,
        grinder_type: Optional[str] = None,
        min_grind_weight: Optional[float] = None,
        max_grind_weight: Optional[float] = None,
        created_after: Optional[datetime] = None,
        created_before: Optional[datetime] = None,
    ) -> list[GrindSettingOut]:
        settings = self.repository.find(
            min_grind_size=min_grind_size,
            max_grind_size=max_grind_size,
            grinder_type=grinder_type,
            min_grind_weight=min_grind_weight,
            max_grind_weight=max_grind_weight,
            created_after=created_after,
            created_before=created_before,
        )
        return [grind_setting_out(setting) for setting in settings]

    def _get_record(self, setting_id: int) -> GrindSettingRecord:
        setting = self.repository.get(setting_id)
        if setting is None:
            raise NotFoundError("GrindSetting", setting_id)
        return setting

    def get(self, setting_id: int) -> GrindSettingOut:
        return grind_setting_out(self._get_record(setting_id))

    def create(self, payload: GrindSettingIn) -> GrindSettingOut:
        raise_for_errors(validate_grind_setting(payload))

        setting = apply_grind_setting(GrindSettingRecord(created_date=utcnow()), payload)
        setting = self.repository.add(setting)
        logger.info("Created grind setting id=%s size=%s", setting.id, setting.grind_size)
        return grind_setting_out(setting)

    def update(self, setting_id: int, payload: GrindSettingIn) -> GrindSettingOut:
        raise_for_errors(validate_grind_setting(payload))
        setting = self._get_record(setting_id)

        apply_grind_setting(setting, payload)
        setting = self.repository.save(setting)
        logger.info("Updated grind setting id=%s", setting.id)
        return grind_setting_out(setting)

    def delete(self, setting_id: int) -> None:
        setting = self._get_record(setting_id)
        references = self.brew_sessions.count_referencing(grind_setting_id=setting_id)
        if references:
            raise ReferentialIntegrityError(
                f"Cannot delete grind setting because it is referenced by {references} brew session(s). "
                "Please delete the associated brew sessions first."
            )
        self.repository.delete(setting)
        logger.info("Deleted grind setting id=%s", setting_id)

    def recently_used(self, count: int = 10) -> list[GrindSettingOut]:
        return [grind_setting_out(setting) for setting in self.repository.recently_used(count)]

    def most_used(self, count: int = 10) -> list[GrindSettingOut]:
        return [grind_setting_out(setting) for setting in self.repository.most_used(count)]

    def grinder_types(self) -> list[str]:
        return self.repository.grinder_types()
