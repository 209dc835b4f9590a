import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ..db import get_session
from ..models import EquipmentType
from ..schemas import BrewingEquipmentIn, BrewingEquipmentOut
from ..services.equipment import BrewingEquipmentService
from .params import PathId, count_param, lookup, naive_utc

router = APIRouter(prefix="/api/equipment", tags=["equipment"])
logger = logging.getLogger("brewlog.api")


def get_service(session: Session = Depends(get_session)) -> BrewingEquipmentService:
    return BrewingEquipmentService(session)


@router.get("", response_model=list[BrewingEquipmentOut])
def get_equipment_list(
    type: Optional[str] = None,
    vendor: Optional[str] = None,
    model: Optional[str] = None,
    created_after: Optional[datetime] = Query(None, alias="createdAfter"),
    created_before: Optional[datetime] = Query(None, alias="createdBefore"),
    service: BrewingEquipmentService = Depends(get_service),
):
    logger.info("Listing equipment type=%s vendor=%s model=%s", type, vendor, model)
    return service.find(
        type=lookup(EquipmentType, type, "type"),
        vendor=vendor,
        model=model,
        created_after=naive_utc(created_after),
        created_before=naive_utc(created_before),
    )


@router.get("/most-used", response_model=list[BrewingEquipmentOut])
def get_most_used_equipment(
    count: int = Depends(count_param),
    service: BrewingEquipmentService = Depends(get_service),
):
    logger.info("Listing %s most used equipment", count)
    return service.most_used(count)


@router.get("/vendors", response_model=list[str])
def get_vendors(service: BrewingEquipmentService = Depends(get_service)):
    return service.vendors()


@router.get("/models", response_model=list[str])
def get_models(service: BrewingEquipmentService = Depends(get_service)):
    return service.models()


@router.get("/{equipment_id}", response_model=BrewingEquipmentOut)
def get_equipment(equipment_id: PathId, service: BrewingEquipmentService = Depends(get_service)):
    logger.info("Fetching equipment id=%s", equipment_id)
    return service.get(equipment_id)


@router.post("", response_model=BrewingEquipmentOut, status_code=201)
def create_equipment(payload: BrewingEquipmentIn, service: BrewingEquipmentService = Depends(get_service)):
    logger.info("Creating equipment vendor=%s model=%s", payload.vendor, payload.model)
    return service.create(payload)


@router.put("/{equipment_id}", response_model=BrewingEquipmentOut)
def update_equipment(
    equipment_id: PathId,
    payload: BrewingEquipmentIn,
    service: BrewingEquipmentService = Depends(get_service),
):
    logger.info("Updating equipment id=%s", equipment_id)
    return service.update(equipment_id, payload)


@router.delete("/{equipment_id}", status_code=204)
def delete_equipment(equipment_id: PathId, service: BrewingEquipmentService = Depends(get_service)):
    logger.info("Deleting equipment id=%s", equipment_id)
    service.delete(equipment_id)
    return Response(status_code=204)
