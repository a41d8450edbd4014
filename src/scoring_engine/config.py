# Default league scoring weights
DEFAULT_KILL_POINTS = 1.0
DEFAULT_DEATH_POINTS = -0.5
DEFAULT_ASSIST_POINTS = 0.25
DEFAULT_DAMAGE_POINTS = 0.01  # Per 100 damage
DEFAULT_OBJECTIVE_TIME_POINTS = 0.02  # Per second
DEFAULT_BOMB_PLANT_POINTS = 2.0
DEFAULT_BOMB_DEFUSE_POINTS = 2.0
DEFAULT_FIRST_BLOOD_POINTS = 1.5

# Damage is scored per this many points of damage dealt
DAMAGE_UNIT = 100

# Display/storage precision for point totals
POINTS_DECIMALS = 1

# Keys accepted by ScoringRules.from_dict, in the camelCase form leagues
# historically stored them
CAMEL_CASE_RULE_KEYS = {
    "killPoints": "kill_points",
    "deathPoints": "death_points",
    "assistPoints": "assist_points",
    "damagePoints": "damage_points",
    "objectiveTimePoints": "objective_time_points",
    "bombPlantPoints": "bomb_plant_points",
    "bombDefusePoints": "bomb_defuse_points",
    "firstBloodPoints": "first_blood_points",
}
