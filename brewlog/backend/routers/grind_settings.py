import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ..db import get_session
from ..schemas import SQL_INT_MAX, SQL_INT_MIN, GrindSettingIn, GrindSettingOut
from ..services.grind_settings import GrindSettingService
from .params import PathId, count_param, naive_utc

router = APIRouter(prefix="/api/grindsettings", tags=["grind settings"])
logger = logging.getLogger("brewlog.api")


def get_service(session: Session = Depends(get_session)) -> GrindSettingService:
    return GrindSettingService(session)


@router.get("", response_model=list[GrindSettingOut])
def get_grind_settings(
    min_grind_size: Optional[int] = Query(None, alias="minGrindSize", ge=SQL_INT_MIN, le=SQL_INT_MAX),
    max_grind_size: Optional[int] = Query(None, alias="maxGrindSize", ge=SQL_INT_MIN, le=SQL_INT_MAX),
    grinder_type: Optional[str] = Query(None, alias="grinderType"),
    min_grind_weight: Optional[float] = Query(None, alias="minGrindWeight"),
    max_grind_weight: Optional[float] = Query(None, alias="maxGrindWeight"),
    created_after: Optional[datetime] = Query(None, alias="createdAfter"),
    created_before: Optional[datetime] = Query(None, alias="createdBefore"),
    service: GrindSettingService = Depends(get_service),
):
    logger.info(
        "Listing grind settings size=%s..%s grinderType=%s", min_grind_size, max_grind_size, grinder_type
    )
    return service.find(
        min_grind_size=min_grind_size,
        max_grind_size=max_grind_size,
        grinder_type=grinder_type,
        min_grind_weight=min_grind_weight,
        max_grind_weight=max_grind_weight,
        created_after=naive_utc(created_after),
        created_before=naive_utc(created_before),
    )


@router.get("/recent", response_model=list[GrindSettingOut])
def get_recent_grind_settings(
    count: int = Depends(count_param),
    service: GrindSettingService = Depends(get_service),
):
    logger.info("Listing %s recently used grind settings", count)
    return service.recently_used(count)


@router.get("/most-used", response_model=list[GrindSettingOut])
def get_most_used_grind_settings(
    count: int = Depends(count_param),
    service: GrindSettingService = Depends(get_service),
):
    logger.info("Listing %s most used grind settings", count)
    return service.most_used(count)


@router.get("/grinder-types", response_model=list[str])
def get_grinder_types(service: GrindSettingService = Depends(get_service)):
    return service.grinder_types()


@router.get("/{setting_id}", response_model=GrindSettingOut)
def get_grind_setting(setting_id: PathId, service: GrindSettingService = Depends(get_service)):
    logger.info("Fetching grind setting id=%s", setting_id)
    return service.get(setting_id)


@router.post("", response_model=GrindSettingOut, status_code=201)
def create_grind_setting(payload: GrindSettingIn, service: GrindSettingService = Depends(get_service)):
    logger.info("Creating grind setting size=%s grinderType=%s", payload.grind_size, payload.grinder_type)
    return service.create(payload)


@router.put("/{setting_id}", response_model=GrindSettingOut)
def update_grind_setting(
    setting_id: PathId,
    payload: GrindSettingIn,
    service: GrindSettingService = Depends(get_service),
):
    logger.info("Updating grind setting id=%s", setting_id)
    return service.update(setting_id, payload)


@router.delete("/{setting_id}", status_code=204)
def delete_grind_setting(setting_id: PathId, service: GrindSettingService = Depends(get_service)):
    logger.info("Deleting grind setting id=%s", setting_id)
    service.delete(setting_id)
    return Response(status_code=204)
