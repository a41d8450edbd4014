"""Fantasy point computation for a single stat line.

This is the one place stat lines are turned into points. Stat ingestion,
team totals and league re-scores all go through :func:`compute_points`.
"""

from decimal import ROUND_HALF_UP, Decimal

from src.scoring_engine.config import DAMAGE_UNIT, POINTS_DECIMALS
from src.scoring_engine.models import PointsBreakdown, ScoringRules, StatLine

_QUANTUM = Decimal(1).scaleb(-POINTS_DECIMALS)


def compute_points(stats: StatLine, rules: ScoringRules) -> PointsBreakdown:
    """Translate a stat line into a point breakdown.

    Pure and total for finite inputs. Components are plain float products;
    the total is their sum in category order with no intermediate rounding.
    Any object exposing the stat attributes of :class:`StatLine` works.
    """
    kills = stats.kills * rules.kill_points
    deaths = stats.deaths * rules.death_points
    assists = stats.assists * rules.assist_points
    damage = (stats.damage / DAMAGE_UNIT) * rules.damage_points
    objective_time = stats.objective_time * rules.objective_time_points
    bomb_plants = stats.bomb_plants * rules.bomb_plant_points
    bomb_defuses = stats.bomb_defuses * rules.bomb_defuse_points
    first_bloods = stats.first_bloods * rules.first_blood_points

    total = (
        kills
        + deaths
        + assists
        + damage
        + objective_time
        + bomb_plants
        + bomb_defuses
        + first_bloods
    )

    return PointsBreakdown(
        kills=kills,
        deaths=deaths,
        assists=assists,
        damage=damage,
        objective_time=objective_time,
        bomb_plants=bomb_plants,
        bomb_defuses=bomb_defuses,
        first_bloods=first_bloods,
        total=total,
    )


def round_points(value: float) -> float:
    """Round a final total to one decimal place, half away from zero.

    Goes through the shortest decimal repr of the float so that values
    like 0.25 round to 0.3 rather than falling foul of binary error.
    """
    return float(Decimal(repr(value)).quantize(_QUANTUM, rounding=ROUND_HALF_UP))
