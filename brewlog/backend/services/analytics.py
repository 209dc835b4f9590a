"""Aggregate statistics and suggestions computed over the brew session history.

The functions here are pure: they take brew session records with their related
bean, grind setting and equipment rows already loaded and return response
models. ``AnalyticsService`` only fetches the rows and hands them over.
"""

import logging
import math
from collections import defaultdict
from datetime import timedelta
from typing import Callable, Iterable, Optional

from sqlalchemy.orm import Session

from ..models import BrewSessionRecord
from ..repositories import (
    BrewingEquipmentRepository,
    BrewSessionRepository,
    CoffeeBeanRepository,
    GrindSettingRepository,
)
from ..schemas import (
    BrewMethodStats,
    BrewTimeCorrelation,
    CorrelationAnalysis,
    DashboardStats,
    EquipmentPerformance,
    EquipmentPerformanceItem,
    EquipmentStats,
    GrindSizeCorrelation,
    RecentBrewSession,
    Recommendation,
    TemperatureCorrelation,
)

logger = logging.getLogger("brewlog.analytics")

RECENT_BREWS = 5
MIN_SAMPLES = 2
TEMPERATURE_BUCKET = 5
BREW_TIME_BUCKET = 30


def _group_by(sessions: Iterable[BrewSessionRecord], key: Callable) -> dict:
    groups = defaultdict(list)
    for session in sessions:
        groups[key(session)].append(session)
    return groups


def _rated(sessions: Iterable[BrewSessionRecord]) -> list[BrewSessionRecord]:
    return [session for session in sessions if session.rating is not None]


def _average_rating(sessions: list[BrewSessionRecord]) -> float:
    ratings = [session.rating for session in sessions if session.rating is not None]
    if not ratings:
        return 0.0
    return sum(ratings) / len(ratings)


def _favorites(sessions: Iterable[BrewSessionRecord]) -> int:
    return sum(1 for session in sessions if session.is_favorite)


def _with_equipment(sessions: Iterable[BrewSessionRecord]) -> list[BrewSessionRecord]:
    return [session for session in sessions if session.brewing_equipment_id is not None]


# Dashboard


def dashboard_stats(
    sessions: list[BrewSessionRecord],
    total_coffee_beans: int,
    total_grind_settings: int,
    total_equipment: int,
) -> DashboardStats:
    method_stats = [
        BrewMethodStats(
            method=method,
            count=len(group),
            average_rating=_average_rating(group),
            favorite_count=_favorites(group),
        )
        for method, group in _group_by(sessions, lambda s: s.method).items()
    ]
    method_stats.sort(key=lambda stats: stats.count, reverse=True)

    equipment_stats = []
    for equipment_id, group in _group_by(_with_equipment(sessions), lambda s: s.brewing_equipment_id).items():
        equipment = group[0].brewing_equipment
        equipment_stats.append(
            EquipmentStats(
                equipment_id=equipment_id,
                equipment_name=equipment.display_name,
                type=equipment.type,
                usage_count=len(group),
                average_rating=_average_rating(group),
                favorite_count=_favorites(group),
            )
        )
    equipment_stats.sort(key=lambda stats: stats.usage_count, reverse=True)

    newest = sorted(sessions, key=lambda s: s.created_date, reverse=True)[:RECENT_BREWS]
    recent_brews = [
        RecentBrewSession(
            id=session.id,
            method=session.method,
            coffee_bean_name=session.coffee_bean.display_name,
            rating=session.rating,
            is_favorite=session.is_favorite,
            created_date=session.created_date,
        )
        for session in newest
    ]

    return DashboardStats(
        total_brew_sessions=len(sessions),
        total_coffee_beans=total_coffee_beans,
        total_grind_settings=total_grind_settings,
        total_equipment=total_equipment,
        favorite_brews=_favorites(sessions),
        average_rating=_average_rating(sessions),
        brew_method_stats=method_stats,
        equipment_stats=equipment_stats,
        recent_brews=recent_brews,
    )


# Correlations


def _buckets(sessions: list[BrewSessionRecord], key: Callable) -> list[tuple]:
    """Return ``(key, average, samples)`` for buckets with enough samples, ascending by key."""
    groups = _group_by(sessions, key)
    return [
        (bucket, _average_rating(group), len(group))
        for bucket, group in sorted(groups.items())
        if len(group) >= MIN_SAMPLES
    ]


def population_variance(values: list[float]) -> float:
    if len(values) < 2:
        return 0.0
    mean = sum(values) / len(values)
    return sum((value - mean) ** 2 for value in values) / len(values)


def correlation_strength(*groupings: list) -> float:
    """Mean variance of bucket averages over the groupings that have more than one bucket."""
    strengths = [
        population_variance([bucket.average_rating for bucket in grouping])
        for grouping in groupings
        if len(grouping) > 1
    ]
    if not strengths:
        return 0.0
    return sum(strengths) / len(strengths)


def temperature_bucket(temperature: float) -> float:
    return math.floor(temperature / TEMPERATURE_BUCKET) * TEMPERATURE_BUCKET


def brew_time_bucket(brew_time: timedelta) -> timedelta:
    seconds = math.floor(brew_time.total_seconds() / BREW_TIME_BUCKET) * BREW_TIME_BUCKET
    return timedelta(seconds=seconds)


def correlation_analysis(sessions: list[BrewSessionRecord]) -> CorrelationAnalysis:
    rated = _rated(sessions)
    if not rated:
        return CorrelationAnalysis()

    grind_sizes = [
        GrindSizeCorrelation(grind_size=key, average_rating=average, sample_count=samples)
        for key, average, samples in _buckets(rated, lambda s: s.grind_setting.grind_size)
    ]
    temperatures = [
        TemperatureCorrelation(temperature_range=float(key), average_rating=average, sample_count=samples)
        for key, average, samples in _buckets(rated, lambda s: temperature_bucket(s.water_temperature))
    ]
    brew_times = [
        BrewTimeCorrelation(brew_time_range=key, average_rating=average, sample_count=samples)
        for key, average, samples in _buckets(rated, lambda s: brew_time_bucket(s.brew_time))
    ]

    return CorrelationAnalysis(
        grind_size_correlations=grind_sizes,
        temperature_correlations=temperatures,
        brew_time_correlations=brew_times,
        overall_correlation_strength=correlation_strength(grind_sizes, temperatures, brew_times),
    )


# Recommendations


def confidence_score(sample_size: int, total_samples: int) -> float:
    if total_samples == 0:
        return 0.0
    sample_ratio = sample_size / total_samples
    sample_confidence = min(sample_size / 10.0, 1.0)
    return (sample_ratio * 0.3 + sample_confidence * 0.7) * 100


def _best_group(groups: dict) -> Optional[tuple]:
    candidates = [(key, group) for key, group in groups.items() if len(group) >= MIN_SAMPLES]
    if not candidates:
        return None
    return max(candidates, key=lambda item: _average_rating(item[1]))


def _best_bean(rated: list[BrewSessionRecord]) -> Optional[Recommendation]:
    best = _best_group(_group_by(rated, lambda s: s.coffee_bean_id))
    if best is None:
        return None
    bean_id, group = best
    bean_name = group[0].coffee_bean.display_name
    average = _average_rating(group)
    return Recommendation(
        type="BestBean",
        title="Try Your Best Performing Bean",
        description=f"{bean_name} has your highest average rating of {average:.1f}",
        confidence_score=confidence_score(len(group), len(rated)),
        parameters={"beanId": bean_id, "beanName": bean_name, "averageRating": average},
    )


def _optimal_grind_size(rated: list[BrewSessionRecord]) -> Optional[Recommendation]:
    best = _best_group(_group_by(rated, lambda s: s.grind_setting.grind_size))
    if best is None:
        return None
    grind_size, group = best
    average = _average_rating(group)
    return Recommendation(
        type="OptimalGrindSize",
        title="Optimal Grind Size Found",
        description=f"Grind size {grind_size} produces your best results with an average rating of {average:.1f}",
        confidence_score=confidence_score(len(group), len(rated)),
        parameters={"grindSize": grind_size, "averageRating": average},
    )


def _best_equipment(rated: list[BrewSessionRecord]) -> Optional[Recommendation]:
    best = _best_group(_group_by(_with_equipment(rated), lambda s: s.brewing_equipment_id))
    if best is None:
        return None
    equipment_id, group = best
    equipment_name = group[0].brewing_equipment.display_name
    average = _average_rating(group)
    return Recommendation(
        type="BestEquipment",
        title="Your Best Performing Equipment",
        description=f"{equipment_name} gives you the best results with an average rating of {average:.1f}",
        confidence_score=confidence_score(len(group), len(rated)),
        parameters={"equipmentId": equipment_id, "equipmentName": equipment_name, "averageRating": average},
    )


def _favorite_combo(rated: list[BrewSessionRecord]) -> Optional[Recommendation]:
    favorites = [session for session in rated if session.is_favorite]
    groups = _group_by(
        favorites,
        lambda s: (s.method, s.coffee_bean.display_name, s.grind_setting.grind_size),
    )
    if not groups:
        return None
    (method, bean_name, grind_size), group = max(groups.items(), key=lambda item: len(item[1]))
    if len(group) < MIN_SAMPLES:
        return None
    return Recommendation(
        type="FavoriteCombo",
        title="Your Favorite Combination",
        description=(
            f"You've marked {method.value} with {bean_name} at grind size {grind_size} "
            f"as favorite {len(group)} times"
        ),
        confidence_score=confidence_score(len(group), len(favorites)),
        parameters={
            "method": method.value,
            "beanName": bean_name,
            "grindSize": grind_size,
            "favoriteCount": len(group),
        },
    )


def recommendations(sessions: list[BrewSessionRecord]) -> list[Recommendation]:
    rated = _rated(sessions)
    if not rated:
        return []

    suggestions = [
        suggestion
        for suggestion in (
            _best_bean(rated),
            _optimal_grind_size(rated),
            _best_equipment(rated),
            _favorite_combo(rated),
        )
        if suggestion is not None
    ]
    # sorted() is stable with reverse=True, so ties keep the order above
    return sorted(suggestions, key=lambda suggestion: suggestion.confidence_score, reverse=True)


# Equipment performance


def performance_score(average_rating: float, total_uses: int, favorite_count: int) -> float:
    rating_score = average_rating / 10.0
    usage_score = min(total_uses / 20.0, 1.0)
    favorite_score = min(favorite_count / 10.0, 1.0)
    return (rating_score * 0.5 + favorite_score * 0.3 + usage_score * 0.2) * 100


def equipment_performance(sessions: list[BrewSessionRecord]) -> EquipmentPerformance:
    items = []
    for equipment_id, group in _group_by(_with_equipment(sessions), lambda s: s.brewing_equipment_id).items():
        equipment = group[0].brewing_equipment
        average = _average_rating(group)
        favorites = _favorites(group)
        items.append(
            EquipmentPerformanceItem(
                equipment_id=equipment_id,
                vendor=equipment.vendor,
                model=equipment.model,
                type=equipment.type,
                total_uses=len(group),
                average_rating=average,
                favorite_count=favorites,
                performance_score=performance_score(average, len(group), favorites),
            )
        )
    if not items:
        return EquipmentPerformance()

    items.sort(key=lambda item: item.performance_score, reverse=True)
    rated_items = [item for item in items if item.average_rating > 0]
    best = max(rated_items, key=lambda item: item.performance_score) if rated_items else None
    most_used = max(items, key=lambda item: item.total_uses)

    return EquipmentPerformance(
        equipment_performance=items,
        best_performing_equipment=best,
        most_used_equipment=most_used,
    )


class AnalyticsService:
    def __init__(self, session: Session):
        self.brew_sessions = BrewSessionRepository(session)
        self.coffee_beans = CoffeeBeanRepository(session)
        self.grind_settings = GrindSettingRepository(session)
        self.equipment = BrewingEquipmentRepository(session)

    def dashboard(self) -> DashboardStats:
        sessions = self.brew_sessions.all_with_related()
        logger.debug("Building dashboard from %s brew sessions", len(sessions))
        return dashboard_stats(
            sessions,
            total_coffee_beans=self.coffee_beans.count(),
            total_grind_settings=self.grind_settings.count(),
            total_equipment=self.equipment.count(),
        )

    def correlations(self) -> CorrelationAnalysis:
        return correlation_analysis(self.brew_sessions.all_with_related())

    def recommendations(self) -> list[Recommendation]:
        return recommendations(self.brew_sessions.all_with_related())

    def equipment_performance(self) -> EquipmentPerformance:
        return equipment_performance(self.brew_sessions.all_with_related())
