from datetime import datetime, timedelta

import pytest

from brewlog.backend.models import (
    BrewingEquipmentRecord,
    BrewMethod,
    BrewSessionRecord,
    CoffeeBeanRecord,
    EquipmentType,
    GrindSettingRecord,
    RoastLevel,
)
from brewlog.backend.services.analytics import (
    brew_time_bucket,
    confidence_score,
    correlation_analysis,
    dashboard_stats,
    equipment_performance,
    performance_score,
    population_variance,
    recommendations,
    temperature_bucket,
)

START = datetime(2024, 5, 1, 8, 0, 0)


def make_bean(bean_id=1, name="Yirgacheffe", brand="Onyx"):
    return CoffeeBeanRecord(id=bean_id, name=name, brand=brand, roast_level=RoastLevel.LIGHT, origin="Ethiopia")


def make_grind(setting_id=1, grind_size=15):
    return GrindSettingRecord(
        id=setting_id,
        grind_size=grind_size,
        grind_time=timedelta(seconds=12),
        grind_weight=18.0,
        grinder_type="Comandante C40",
        notes="",
    )


def make_equipment(equipment_id=1, vendor="Breville", model="Barista Express"):
    return BrewingEquipmentRecord(
        id=equipment_id, vendor=vendor, model=model, type=EquipmentType.ESPRESSO_MACHINE, specifications={}
    )


def make_brew(
    index,
    rating=None,
    method=BrewMethod.ESPRESSO,
    bean=None,
    grind=None,
    equipment=None,
    is_favorite=False,
    water_temperature=93.0,
    brew_time=timedelta(seconds=28),
):
    bean = bean or make_bean()
    grind = grind or make_grind()
    return BrewSessionRecord(
        id=index,
        method=method,
        water_temperature=water_temperature,
        brew_time=brew_time,
        tasting_notes="",
        rating=rating,
        is_favorite=is_favorite,
        created_date=START + timedelta(minutes=index),
        coffee_bean_id=bean.id,
        coffee_bean=bean,
        grind_setting_id=grind.id,
        grind_setting=grind,
        brewing_equipment_id=equipment.id if equipment else None,
        brewing_equipment=equipment,
    )


class TestDashboard:
    def test_averages_over_rated_sessions_only(self):
        sessions = [
            make_brew(1, rating=8),
            make_brew(2, rating=9),
            make_brew(3, rating=7, method=BrewMethod.POUR_OVER),
            make_brew(4, rating=None, method=BrewMethod.DRIP, is_favorite=True),
        ]

        stats = dashboard_stats(sessions, total_coffee_beans=1, total_grind_settings=1, total_equipment=0)

        assert stats.total_brew_sessions == 4
        assert stats.favorite_brews == 1
        assert stats.average_rating == pytest.approx(8.0)
        by_method = {item.method: item for item in stats.brew_method_stats}
        assert stats.brew_method_stats[0].method == BrewMethod.ESPRESSO
        assert by_method[BrewMethod.ESPRESSO].count == 2
        assert by_method[BrewMethod.ESPRESSO].average_rating == pytest.approx(8.5)
        assert by_method[BrewMethod.POUR_OVER].count == 1
        assert by_method[BrewMethod.POUR_OVER].average_rating == pytest.approx(7.0)
        assert by_method[BrewMethod.DRIP].average_rating == 0
        assert by_method[BrewMethod.DRIP].favorite_count == 1

    def test_equipment_stats_and_recent_brews(self):
        grinder = make_equipment()
        sessions = [make_brew(index, rating=8, equipment=grinder if index % 2 else None) for index in range(1, 8)]

        stats = dashboard_stats(sessions, total_coffee_beans=1, total_grind_settings=1, total_equipment=1)

        assert len(stats.equipment_stats) == 1
        assert stats.equipment_stats[0].equipment_name == "Breville Barista Express"
        assert stats.equipment_stats[0].usage_count == 4
        assert [brew.id for brew in stats.recent_brews] == [7, 6, 5, 4, 3]
        assert stats.recent_brews[0].coffee_bean_name == "Onyx Yirgacheffe"

    def test_empty_history(self):
        stats = dashboard_stats([], total_coffee_beans=0, total_grind_settings=0, total_equipment=0)

        assert stats.average_rating == 0
        assert stats.brew_method_stats == []
        assert stats.recent_brews == []


class TestCorrelations:
    def test_buckets_need_two_samples(self):
        fine, coarse, single = make_grind(1, 10), make_grind(2, 12), make_grind(3, 20)
        sessions = [
            make_brew(1, rating=6, grind=fine),
            make_brew(2, rating=8, grind=fine),
            make_brew(3, rating=9, grind=coarse),
            make_brew(4, rating=9, grind=coarse),
            make_brew(5, rating=3, grind=single),
            make_brew(6, rating=None, grind=single),
        ]

        analysis = correlation_analysis(sessions)

        assert [(c.grind_size, c.average_rating, c.sample_count) for c in analysis.grind_size_correlations] == [
            (10, 7.0, 2),
            (12, 9.0, 2),
        ]
        # one temperature bucket and one brew time bucket, so only grind size contributes
        assert analysis.overall_correlation_strength == pytest.approx(1.0)

    def test_bucket_keys(self):
        assert temperature_bucket(93.7) == 90
        assert temperature_bucket(95.0) == 95
        assert brew_time_bucket(timedelta(seconds=59)) == timedelta(seconds=30)
        assert brew_time_bucket(timedelta(minutes=4, seconds=5)) == timedelta(minutes=4)

    def test_temperature_and_time_ranges_serialize(self):
        sessions = [make_brew(index, rating=7, water_temperature=91.5) for index in range(1, 3)]

        body = correlation_analysis(sessions).model_dump(by_alias=True)

        assert body["temperatureCorrelations"] == [{"temperatureRange": 90.0, "averageRating": 7.0, "sampleCount": 2}]
        assert body["brewTimeCorrelations"][0]["brewTimeRange"] == "00:00:00"

    def test_no_rated_sessions(self):
        analysis = correlation_analysis([make_brew(1)])

        assert analysis.grind_size_correlations == []
        assert analysis.overall_correlation_strength == 0

    def test_population_variance(self):
        assert population_variance([7.0, 9.0]) == pytest.approx(1.0)
        assert population_variance([5.0]) == 0


class TestRecommendations:
    def test_confidence_score(self):
        assert confidence_score(0, 0) == 0
        assert confidence_score(2, 4) == pytest.approx(29.0)
        assert confidence_score(20, 20) == pytest.approx(100.0)

    def test_suggestions_ordered_by_confidence(self):
        house = make_bean(1, name="House", brand="Local")
        guest = make_bean(2, name="Guest", brand="Visitor")
        machine = make_equipment()
        sessions = [
            make_brew(1, rating=9, bean=house, equipment=machine, is_favorite=True),
            make_brew(2, rating=9, bean=house, equipment=machine, is_favorite=True),
            make_brew(3, rating=6, bean=guest, grind=make_grind(2, 20)),
            make_brew(4, rating=5, bean=guest, grind=make_grind(2, 20)),
        ]

        suggestions = recommendations(sessions)

        assert [item.type for item in suggestions] == ["FavoriteCombo", "BestBean", "OptimalGrindSize", "BestEquipment"]
        best_bean = suggestions[1]
        assert best_bean.title == "Try Your Best Performing Bean"
        assert best_bean.description == "Local House has your highest average rating of 9.0"
        assert best_bean.parameters == {"beanId": 1, "beanName": "Local House", "averageRating": 9.0}
        assert suggestions[0].description == (
            "You've marked Espresso with Local House at grind size 15 as favorite 2 times"
        )
        assert all(0 <= item.confidence_score <= 100 for item in suggestions)

    def test_single_favorite_gives_no_combo(self):
        sessions = [make_brew(1, rating=9, is_favorite=True), make_brew(2, rating=8)]

        assert "FavoriteCombo" not in [item.type for item in recommendations(sessions)]

    def test_unrated_history_gives_nothing(self):
        assert recommendations([make_brew(1), make_brew(2)]) == []


class TestEquipmentPerformance:
    def test_score_saturates(self):
        assert performance_score(10, 20, 10) == pytest.approx(100.0)
        assert performance_score(10, 40, 30) == pytest.approx(100.0)
        assert performance_score(8, 4, 2) == pytest.approx(50.0)

    def test_score_never_drops_as_an_input_grows(self):
        ratings = [performance_score(rating, 5, 3) for rating in range(11)]
        uses = [performance_score(7, total, 3) for total in range(31)]
        favorites = [performance_score(7, 5, count) for count in range(16)]

        for scores in (ratings, uses, favorites):
            assert all(later >= earlier for earlier, later in zip(scores, scores[1:]))

    def test_best_and_most_used(self):
        espresso = make_equipment(1)
        press = make_equipment(2, vendor="Bodum", model="Chambord")
        sessions = [
            make_brew(1, rating=9, equipment=espresso, is_favorite=True),
            make_brew(2, rating=None, equipment=press),
            make_brew(3, rating=None, equipment=press),
            make_brew(4, rating=None, equipment=press),
            make_brew(5, rating=7),
        ]

        performance = equipment_performance(sessions)

        assert [item.equipment_id for item in performance.equipment_performance] == [1, 2]
        assert performance.best_performing_equipment.equipment_id == 1
        assert performance.most_used_equipment.equipment_id == 2
        assert performance.most_used_equipment.average_rating == 0

    def test_no_equipment_sessions(self):
        performance = equipment_performance([make_brew(1, rating=8)])

        assert performance.equipment_performance == []
        assert performance.best_performing_equipment is None
        assert performance.most_used_equipment is None


def test_analytics_endpoints(client, create_bean, create_grind_setting, create_equipment, create_brew_session):
    bean = create_bean()
    grind = create_grind_setting()
    machine = create_equipment()
    create_brew_session(bean, grind, machine, rating=8)
    create_brew_session(bean, grind, machine, rating=9)
    create_brew_session(bean, grind, method="PourOver", brewTime="00:03:00", rating=7)

    dashboard = client.get("/api/analytics/dashboard").json()
    assert dashboard["totalBrewSessions"] == 3
    assert dashboard["averageRating"] == pytest.approx(8.0)
    assert dashboard["brewMethodStats"][0] == {
        "method": "Espresso",
        "count": 2,
        "averageRating": 8.5,
        "favoriteCount": 0,
    }

    correlations = client.get("/api/analytics/correlations").json()
    assert correlations["grindSizeCorrelations"] == [{"grindSize": 15, "averageRating": 8.0, "sampleCount": 3}]

    suggestions = client.get("/api/analytics/recommendations").json()
    assert {item["type"] for item in suggestions} == {"BestBean", "OptimalGrindSize", "BestEquipment"}

    performance = client.get("/api/analytics/equipment-performance").json()
    assert performance["mostUsedEquipment"]["totalUses"] == 2
    assert performance["bestPerformingEquipment"]["vendor"] == "Breville"
