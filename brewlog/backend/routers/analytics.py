import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..config import get_settings
from ..db import get_session
from ..models import utcnow
from ..schemas import CorrelationAnalysis, DashboardStats, EquipmentPerformance, HealthOut, Recommendation
from ..services.analytics import AnalyticsService

router = APIRouter(prefix="/api", tags=["analytics"])
logger = logging.getLogger("brewlog.api")


def get_service(session: Session = Depends(get_session)) -> AnalyticsService:
    return AnalyticsService(session)


@router.get("/analytics/dashboard", response_model=DashboardStats)
def get_dashboard(service: AnalyticsService = Depends(get_service)):
    logger.info("Building dashboard statistics")
    return service.dashboard()


@router.get("/analytics/correlations", response_model=CorrelationAnalysis)
def get_correlations(service: AnalyticsService = Depends(get_service)):
    logger.info("Building correlation analysis")
    return service.correlations()


@router.get("/analytics/recommendations", response_model=list[Recommendation])
def get_recommendations(service: AnalyticsService = Depends(get_service)):
    logger.info("Building recommendations")
    return service.recommendations()


@router.get("/analytics/equipment-performance", response_model=EquipmentPerformance)
def get_equipment_performance(service: AnalyticsService = Depends(get_service)):
    logger.info("Building equipment performance")
    return service.equipment_performance()


@router.get("/health", response_model=HealthOut, tags=["health"])
def health():
    return HealthOut(status="Healthy", timestamp=utcnow(), version=get_settings().version)
