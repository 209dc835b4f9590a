import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ..db import get_session
from ..models import RoastLevel
from ..schemas import CoffeeBeanIn, CoffeeBeanOut
from ..services.coffee_beans import CoffeeBeanService
from .params import PathId, count_param, lookup, naive_utc

router = APIRouter(prefix="/api/coffeebeans", tags=["coffee beans"])
logger = logging.getLogger("brewlog.api")


def get_service(session: Session = Depends(get_session)) -> CoffeeBeanService:
    return CoffeeBeanService(session)


@router.get("", response_model=list[CoffeeBeanOut])
def get_coffee_beans(
    name: Optional[str] = None,
    brand: Optional[str] = None,
    roast_level: Optional[str] = Query(None, alias="roastLevel"),
    origin: Optional[str] = None,
    created_after: Optional[datetime] = Query(None, alias="createdAfter"),
    created_before: Optional[datetime] = Query(None, alias="createdBefore"),
    service: CoffeeBeanService = Depends(get_service),
):
    logger.info("Listing coffee beans name=%s brand=%s roastLevel=%s", name, brand, roast_level)
    return service.find(
        name=name,
        brand=brand,
        roast_level=lookup(RoastLevel, roast_level, "roastLevel"),
        origin=origin,
        created_after=naive_utc(created_after),
        created_before=naive_utc(created_before),
    )


@router.get("/recent", response_model=list[CoffeeBeanOut])
def get_recent_coffee_beans(
    count: int = Depends(count_param),
    service: CoffeeBeanService = Depends(get_service),
):
    logger.info("Listing %s recently added coffee beans", count)
    return service.recently_added(count)


@router.get("/most-used", response_model=list[CoffeeBeanOut])
def get_most_used_coffee_beans(
    count: int = Depends(count_param),
    service: CoffeeBeanService = Depends(get_service),
):
    logger.info("Listing %s most used coffee beans", count)
    return service.most_used(count)


@router.get("/{bean_id}", response_model=CoffeeBeanOut)
def get_coffee_bean(bean_id: PathId, service: CoffeeBeanService = Depends(get_service)):
    logger.info("Fetching coffee bean id=%s", bean_id)
    return service.get(bean_id)


@router.post("", response_model=CoffeeBeanOut, status_code=201)
def create_coffee_bean(payload: CoffeeBeanIn, service: CoffeeBeanService = Depends(get_service)):
    logger.info("Creating coffee bean name=%s brand=%s", payload.name, payload.brand)
    return service.create(payload)


@router.put("/{bean_id}", response_model=CoffeeBeanOut)
def update_coffee_bean(bean_id: PathId, payload: CoffeeBeanIn, service: CoffeeBeanService = Depends(get_service)):
    logger.info("Updating coffee bean id=%s", bean_id)
    return service.update(bean_id, payload)


@router.delete("/{bean_id}", status_code=204)
def delete_coffee_bean(bean_id: PathId, service: CoffeeBeanService = Depends(get_service)):
    logger.info("Deleting coffee bean id=%s", bean_id)
    service.delete(bean_id)
    return Response(status_code=204)
