"""Liturgical calendar: computus, seasons and the feast-day payload."""

from __future__ import annotations

from datetime import date
from unittest.mock import patch

import pytest

from mirror.adapters.liturgical import (
    ADVENT,
    CHRISTMAS,
    EASTER,
    LENT,
    ORDINARY_TIME,
    baptism_of_the_lord,
    easter_sunday,
    epiphany,
    feast_day,
    first_sunday_of_advent,
    liturgical_day,
)


class TestMovableDates:
    @pytest.mark.parametrize(
        "year,expected",
        [(2024, date(2024, 3, 31)), (2025, date(2025, 4, 20)), (2019, date(2019, 4, 21))],
    )
    def test_easter(self, year, expected):
        assert easter_sunday(year) == expected

    def test_first_sunday_of_advent(self):
        assert first_sunday_of_advent(2024) == date(2024, 12, 1)
        assert first_sunday_of_advent(2025) == date(2025, 11, 30)

    def test_epiphany_and_baptism(self):
        assert epiphany(2025) == date(2025, 1, 5)
        assert baptism_of_the_lord(2025) == date(2025, 1, 12)
        # Epiphany on January 7 moves the Baptism to the next day
        assert epiphany(2024) == date(2024, 1, 7)
        assert baptism_of_the_lord(2024) == date(2024, 1, 8)


class TestLiturgicalDay:
    def test_ash_wednesday(self):
        day = liturgical_day(date(2024, 2, 14))
        assert day.season == LENT
        assert day.celebration.name == "Ash Wednesday"
        assert day.celebration.color == "violet"

    def test_good_friday(self):
        day = liturgical_day(date(2024, 3, 29))
        assert day.celebration.name == "Good Friday"
        assert day.celebration.color == "red"

    def test_easter_season(self):
        assert liturgical_day(date(2024, 4, 14)).season == EASTER
        assert liturgical_day(date(2024, 5, 19)).celebration.name == "Pentecost Sunday"

    def test_ordinary_time_weekday(self):
        day = liturgical_day(date(2024, 7, 10))
        assert day.season == ORDINARY_TIME
        assert day.celebration.name == "Wednesday of the 14th Week of Ordinary Time"
        assert day.celebration.color == "green"

    def test_gaudete_sunday_is_rose(self):
        day = liturgical_day(date(2024, 12, 15))
        assert day.season == ADVENT
        assert day.celebration.name == "3rd Sunday of Advent"
        assert day.celebration.color == "rose"

    def test_memorial_in_lent_becomes_commemoration(self):
        day = liturgical_day(date(2025, 3, 17))
        assert day.celebration.name == "Saint Patrick"
        assert day.celebration.rank == "COMMEMORATION"

    def test_christmas_season_wraps_new_year(self):
        assert liturgical_day(date(2025, 1, 3)).season == CHRISTMAS
        assert liturgical_day(date(2024, 12, 30)).season == CHRISTMAS


class TestFeastDayPayload:
    def test_shape(self):
        data = feast_day(date(2024, 7, 10))
        assert data["feastDay"] == "Wednesday of the 14th Week of Ordinary Time"
        assert data["season"] == "Ordinary Time"
        assert data["color"] == "green"
        assert data["rank"] == "Weekday"
        assert data["lastUpdated"]

    def test_failure_returns_nulls(self):
        with patch(
            "mirror.adapters.liturgical.liturgical_day", side_effect=RuntimeError("boom")
        ):
            data = feast_day(date(2024, 7, 10))
        assert data["feastDay"] is None
        assert data["season"] is None
        assert data["color"] is None
        assert data["rank"] is None
