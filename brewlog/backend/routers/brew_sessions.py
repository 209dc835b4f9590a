import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ..db import get_session
from ..models import BrewMethod
from ..schemas import SQL_INT_MAX, SQL_INT_MIN, BrewSessionIn, BrewSessionOut
from ..services.brew_sessions import BrewSessionService
from .params import PathId, count_param, lookup, naive_utc

router = APIRouter(prefix="/api/brewsessions", tags=["brew sessions"])
logger = logging.getLogger("brewlog.api")


def get_service(session: Session = Depends(get_session)) -> BrewSessionService:
    return BrewSessionService(session)


@router.get("", response_model=list[BrewSessionOut])
def get_brew_sessions(
    method: Optional[str] = None,
    coffee_bean_id: Optional[int] = Query(None, alias="coffeeBeanId", ge=SQL_INT_MIN, le=SQL_INT_MAX),
    grind_setting_id: Optional[int] = Query(None, alias="grindSettingId", ge=SQL_INT_MIN, le=SQL_INT_MAX),
    brewing_equipment_id: Optional[int] = Query(None, alias="brewingEquipmentId", ge=SQL_INT_MIN, le=SQL_INT_MAX),
    min_water_temperature: Optional[float] = Query(None, alias="minWaterTemperature"),
    max_water_temperature: Optional[float] = Query(None, alias="maxWaterTemperature"),
    min_rating: Optional[int] = Query(None, alias="minRating", ge=SQL_INT_MIN, le=SQL_INT_MAX),
    max_rating: Optional[int] = Query(None, alias="maxRating", ge=SQL_INT_MIN, le=SQL_INT_MAX),
    is_favorite: Optional[bool] = Query(None, alias="isFavorite"),
    created_after: Optional[datetime] = Query(None, alias="createdAfter"),
    created_before: Optional[datetime] = Query(None, alias="createdBefore"),
    service: BrewSessionService = Depends(get_service),
):
    logger.info(
        "Listing brew sessions method=%s coffeeBeanId=%s isFavorite=%s", method, coffee_bean_id, is_favorite
    )
    return service.find(
        method=lookup(BrewMethod, method, "method"),
        coffee_bean_id=coffee_bean_id,
        grind_setting_id=grind_setting_id,
        brewing_equipment_id=brewing_equipment_id,
        min_water_temperature=min_water_temperature,
        max_water_temperature=max_water_temperature,
        min_rating=min_rating,
        max_rating=max_rating,
        is_favorite=is_favorite,
        created_after=naive_utc(created_after),
        created_before=naive_utc(created_before),
    )


@router.get("/favorites", response_model=list[BrewSessionOut])
def get_favorite_brew_sessions(service: BrewSessionService = Depends(get_service)):
    logger.info("Listing favorite brew sessions")
    return service.favorites()


@router.get("/recent", response_model=list[BrewSessionOut])
def get_recent_brew_sessions(
    count: int = Depends(count_param),
    service: BrewSessionService = Depends(get_service),
):
    logger.info("Listing %s recent brew sessions", count)
    return service.recent(count)


@router.get("/top-rated", response_model=list[BrewSessionOut])
def get_top_rated_brew_sessions(
    count: int = Depends(count_param),
    service: BrewSessionService = Depends(get_service),
):
    logger.info("Listing %s top rated brew sessions", count)
    return service.top_rated(count)


@router.get("/{session_id}", response_model=BrewSessionOut)
def get_brew_session(session_id: PathId, service: BrewSessionService = Depends(get_service)):
    logger.info("Fetching brew session id=%s", session_id)
    return service.get(session_id)


@router.post("", response_model=BrewSessionOut, status_code=201)
def create_brew_session(payload: BrewSessionIn, service: BrewSessionService = Depends(get_service)):
    logger.info("Creating brew session method=%s coffeeBeanId=%s", payload.method.value, payload.coffee_bean_id)
    return service.create(payload)


@router.put("/{session_id}", response_model=BrewSessionOut)
def update_brew_session(
    session_id: PathId,
    payload: BrewSessionIn,
    service: BrewSessionService = Depends(get_service),
):
    logger.info("Updating brew session id=%s", session_id)
    return service.update(session_id, payload)


@router.post("/{session_id}/favorite", response_model=BrewSessionOut)
def toggle_favorite(session_id: PathId, service: BrewSessionService = Depends(get_service)):
    logger.info("Toggling favorite for brew session id=%s", session_id)
    return service.toggle_favorite(session_id)


@router.delete("/{session_id}", status_code=204)
def delete_brew_session(session_id: PathId, service: BrewSessionService = Depends(get_service)):
    logger.info("Deleting brew session id=%s", session_id)
    service.delete(session_id)
    return Response(status_code=204)
