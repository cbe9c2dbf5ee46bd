"""Roman Catholic liturgical day, computed locally for the US calendar.

Covers seasons, Sundays, movable and fixed solemnities, principal feasts and
a selection of memorials. Transfer rules for solemnities that collide with
Holy Week or the Easter octave are not applied.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Any

logger = logging.getLogger(__name__)

ADVENT = "Advent"
CHRISTMAS = "Christmas"
LENT = "Lent"
EASTER = "Easter"
ORDINARY_TIME = "Ordinary Time"

RANK_LABELS = {
    "SOLEMNITY": "Solemnity",
    "SUNDAY": "Sunday",
    "TRIDUUM": "Triduum",
    "HOLY_WEEK": "Holy Week",
    "FEAST": "Feast",
    "MEMORIAL": "Memorial",
    "OPT_MEMORIAL": "Optional Memorial",
    "COMMEMORATION": "Commemoration",
    "FERIA": "Weekday",
}

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


@dataclass(frozen=True)
class Celebration:
    name: str
    rank: str  # key of RANK_LABELS
    color: str


# (month, day) -> celebration; feasts of the Lord are marked so they can replace
# a Sunday in Ordinary Time.
FIXED_CELEBRATIONS: dict[tuple[int, int], Celebration] = {
    (1, 1): Celebration("Mary, the Holy Mother of God", "SOLEMNITY", "white"),
    (1, 4): Celebration("Saint Elizabeth Ann Seton", "MEMORIAL", "white"),
    (1, 25): Celebration("The Conversion of Saint Paul the Apostle", "FEAST", "white"),
    (2, 2): Celebration("The Presentation of the Lord", "FEAST", "white"),
    (2, 14): Celebration("Saints Cyril and Methodius", "MEMORIAL", "white"),
    (2, 22): Celebration("The Chair of Saint Peter the Apostle", "FEAST", "white"),
    (3, 17): Celebration("Saint Patrick", "OPT_MEMORIAL", "white"),
    (3, 19): Celebration("Saint Joseph, Spouse of the Blessed Virgin Mary", "SOLEMNITY", "white"),
    (3, 25): Celebration("The Annunciation of the Lord", "SOLEMNITY", "white"),
    (4, 25): Celebration("Saint Mark, Evangelist", "FEAST", "red"),
    (5, 3): Celebration("Saints Philip and James, Apostles", "FEAST", "red"),
    (5, 14): Celebration("Saint Matthias, Apostle", "FEAST", "red"),
    (5, 31): Celebration("The Visitation of the Blessed Virgin Mary", "FEAST", "white"),
    (6, 24): Celebration("The Nativity of Saint John the Baptist", "SOLEMNITY", "white"),
    (6, 29): Celebration("Saints Peter and Paul, Apostles", "SOLEMNITY", "red"),
    (7, 3): Celebration("Saint Thomas, Apostle", "FEAST", "red"),
    (7, 22): Celebration("Saint Mary Magdalene", "FEAST", "white"),
    (7, 25): Celebration("Saint James, Apostle", "FEAST", "red"),
    (7, 26): Celebration("Saints Joachim and Anne", "MEMORIAL", "white"),
    (8, 6): Celebration("The Transfiguration of the Lord", "FEAST", "white"),
    (8, 10): Celebration("Saint Lawrence, Deacon and Martyr", "FEAST", "red"),
    (8, 15): Celebration("The Assumption of the Blessed Virgin Mary", "SOLEMNITY", "white"),
    (8, 24): Celebration("Saint Bartholomew, Apostle", "FEAST", "red"),
    (9, 8): Celebration("The Nativity of the Blessed Virgin Mary", "FEAST", "white"),
    (9, 14): Celebration("The Exaltation of the Holy Cross", "FEAST", "red"),
    (9, 21): Celebration("Saint Matthew, Apostle and Evangelist", "FEAST", "red"),
    (9, 29): Celebration("Saints Michael, Gabriel and Raphael, Archangels", "FEAST", "white"),
    (10, 4): Celebration("Saint Francis of Assisi", "MEMORIAL", "white"),
    (10, 18): Celebration("Saint Luke, Evangelist", "FEAST", "red"),
    (10, 28): Celebration("Saints Simon and Jude, Apostles", "FEAST", "red"),
    (11, 1): Celebration("All Saints", "SOLEMNITY", "white"),
    (11, 2): Celebration(
        "The Commemoration of All the Faithful Departed", "COMMEMORATION", "violet"
    ),
    (11, 9): Celebration("The Dedication of the Lateran Basilica", "FEAST", "white"),
    (11, 30): Celebration("Saint Andrew, Apostle", "FEAST", "red"),
    (12, 8): Celebration(
        "The Immaculate Conception of the Blessed Virgin Mary", "SOLEMNITY", "white"
    ),
    (12, 12): Celebration("Our Lady of Guadalupe", "FEAST", "white"),
    (12, 25): Celebration("The Nativity of the Lord", "SOLEMNITY", "white"),
    (12, 26): Celebration("Saint Stephen, the First Martyr", "FEAST", "red"),
    (12, 27): Celebration("Saint John, Apostle and Evangelist", "FEAST", "white"),
    (12, 28): Celebration("The Holy Innocents, Martyrs", "FEAST", "red"),
}

LORD_FEASTS = {(2, 2), (8, 6), (9, 14), (11, 9)}


def easter_sunday(year: int) -> date:
    """Gregorian computus (anonymous algorithm)."""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7  # noqa: E741
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


def _sunday_on_or_before(d: date) -> date:
    return d - timedelta(days=(d.weekday() + 1) % 7)


def first_sunday_of_advent(year: int) -> date:
    christmas = date(year, 12, 25)
    return _sunday_on_or_before(christmas - timedelta(days=1)) - timedelta(weeks=3)


def epiphany(year: int) -> date:
    """US: the Sunday between January 2 and 8."""
    jan2 = date(year, 1, 2)
    return jan2 + timedelta(days=(6 - jan2.weekday()) % 7)


def baptism_of_the_lord(year: int) -> date:
    """Sunday after Epiphany, or the Monday after when Epiphany falls on Jan 7 or 8."""
    ep = epiphany(year)
    return ep + timedelta(days=1) if ep.day >= 7 else ep + timedelta(weeks=1)


def holy_family(year: int) -> date:
    """Sunday within the Christmas octave, else December 30."""
    for day in range(26, 32):
        d = date(year, 12, day)
        if d.weekday() == 6:
            return d
    return date(year, 12, 30)


def _ordinal(n: int) -> str:
    suffix = "th" if 10 <= n % 100 <= 20 else {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


@dataclass(frozen=True)
class LiturgicalDay:
    season: str
    celebration: Celebration


class LiturgicalCalendar:
    """Movable dates for one civil year."""

    def __init__(self, year: int) -> None:
        self.year = year
        self.easter = easter_sunday(year)
        self.ash_wednesday = self.easter - timedelta(days=46)
        self.pentecost = self.easter + timedelta(days=49)
        self.advent = first_sunday_of_advent(year)
        self.christ_the_king = self.advent - timedelta(weeks=1)
        self.baptism = baptism_of_the_lord(year)

    def movable(self) -> dict[date, Celebration]:
        e = self.easter
        return {
            epiphany(self.year): Celebration("The Epiphany of the Lord", "SOLEMNITY", "white"),
            self.baptism: Celebration("The Baptism of the Lord", "FEAST", "white"),
            self.ash_wednesday: Celebration("Ash Wednesday", "FERIA", "violet"),
            e - timedelta(days=7): Celebration(
                "Palm Sunday of the Passion of the Lord", "HOLY_WEEK", "red"
            ),
            e - timedelta(days=3): Celebration("Holy Thursday", "TRIDUUM", "white"),
            e - timedelta(days=2): Celebration("Good Friday", "TRIDUUM", "red"),
            e - timedelta(days=1): Celebration("Holy Saturday", "TRIDUUM", "white"),
            e: Celebration("Easter Sunday of the Resurrection of the Lord", "SOLEMNITY", "white"),
            e + timedelta(days=7): Celebration("Divine Mercy Sunday", "SUNDAY", "white"),
            e + timedelta(days=42): Celebration("The Ascension of the Lord", "SOLEMNITY", "white"),
            self.pentecost: Celebration("Pentecost Sunday", "SOLEMNITY", "red"),
            e + timedelta(days=56): Celebration("The Most Holy Trinity", "SOLEMNITY", "white"),
            e + timedelta(days=63): Celebration(
                "The Most Holy Body and Blood of Christ", "SOLEMNITY", "white"
            ),
            e + timedelta(days=68): Celebration(
                "The Most Sacred Heart of Jesus", "SOLEMNITY", "white"
            ),
            e + timedelta(days=69): Celebration(
                "The Immaculate Heart of the Blessed Virgin Mary", "MEMORIAL", "white"
            ),
            self.christ_the_king: Celebration(
                "Our Lord Jesus Christ, King of the Universe", "SOLEMNITY", "white"
            ),
            holy_family(self.year): Celebration("The Holy Family", "FEAST", "white"),
        }

    def season(self, d: date) -> str:
        if d <= self.baptism or d >= date(self.year, 12, 25):
            return CHRISTMAS
        if self.ash_wednesday <= d < self.easter:
            return LENT
        if self.easter <= d <= self.pentecost:
            return EASTER
        if d >= self.advent:
            return ADVENT
        return ORDINARY_TIME

    def week(self, d: date, season: str) -> int:
        """Week number within *season*, counted from its Sundays."""
        sunday = _sunday_on_or_before(d)
        if season == ADVENT:
            return (sunday - self.advent).days // 7 + 1
        if season == LENT:
            first = self.ash_wednesday + timedelta(days=4)
            return (sunday - first).days // 7 + 1
        if season == EASTER:
            return (sunday - self.easter).days // 7 + 1
        if d > self.pentecost:
            return 34 - (self.christ_the_king - sunday).days // 7
        return (sunday - _sunday_on_or_before(self.baptism)).days // 7 + 1

    def season_color(self, d: date, season: str) -> str:
        if season == ADVENT:
            return "rose" if d == self.advent + timedelta(weeks=2) else "violet"
        if season == LENT:
            return "rose" if d == self.easter - timedelta(weeks=3) else "violet"
        if season in (CHRISTMAS, EASTER):
            return "white"
        return "green"

    def ferial(self, d: date, season: str) -> Celebration:
        color = self.season_color(d, season)
        weekday = WEEKDAY_NAMES[d.weekday()]
        if season == CHRISTMAS:
            name = f"{weekday} of Christmas Time"
            return Celebration(name, "SUNDAY" if weekday == "Sunday" else "FERIA", color)
        if season == LENT and d < self.ash_wednesday + timedelta(days=4):
            return Celebration(f"{weekday} after Ash Wednesday", "FERIA", color)
        if season == EASTER and d < self.easter + timedelta(days=7):
            return Celebration(f"{weekday} within the Octave of Easter", "SOLEMNITY", color)

        week = self.week(d, season)
        if weekday == "Sunday":
            return Celebration(f"{_ordinal(week)} Sunday of {season}", "SUNDAY", color)
        return Celebration(f"{weekday} of the {_ordinal(week)} Week of {season}", "FERIA", color)

    def day(self, d: date) -> LiturgicalDay:
        season = self.season(d)
        movable = self.movable().get(d)
        if movable is not None:
            return LiturgicalDay(season, movable)

        fixed = FIXED_CELEBRATIONS.get((d.month, d.day))
        is_sunday = d.weekday() == 6
        if fixed is not None:
            if fixed.rank == "SOLEMNITY":
                return LiturgicalDay(season, fixed)
            if not is_sunday:
                if season == LENT and fixed.rank in ("MEMORIAL", "OPT_MEMORIAL"):
                    fixed = Celebration(fixed.name, "COMMEMORATION", "violet")
                return LiturgicalDay(season, fixed)
            if season == ORDINARY_TIME and (d.month, d.day) in LORD_FEASTS:
                return LiturgicalDay(season, fixed)
        return LiturgicalDay(season, self.ferial(d, season))


def liturgical_day(d: date) -> LiturgicalDay:
    return LiturgicalCalendar(d.year).day(d)


def feast_day(today: date) -> dict[str, Any]:
    """Display payload for *today*. All fields null if computation fails."""
    try:
        result = liturgical_day(today)
    except Exception:
        logger.exception("Feast day calculation failed for %s", today)
        return {
            "feastDay": None,
            "season": None,
            "color": None,
            "rank": None,
            "lastUpdated": datetime.now(UTC).isoformat(),
        }
    return {
        "feastDay": result.celebration.name,
        "season": result.season,
        "color": result.celebration.color,
        "rank": RANK_LABELS.get(result.celebration.rank, result.celebration.rank),
        "lastUpdated": datetime.now(UTC).isoformat(),
    }
