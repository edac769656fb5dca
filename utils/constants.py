import json
from config.paths import CONSTANTS_PATH

"""
Loads configuration constants from config/constants.json and exposes them as module-level variables.
Edit constants.json to change values; import from utils.constants to use in code.
"""

with open(CONSTANTS_PATH, "r", encoding="utf-8") as f:
    _constants = json.load(f)

# Session defaults
DEFAULT_MIN_OPERATORS = _constants["DEFAULT_MIN_OPERATORS"]
DEFAULT_MODULE_CAPACITY = _constants["DEFAULT_MODULE_CAPACITY"]

# Availability search horizons
FIRST_AVAILABLE_HORIZON_DAYS = _constants["FIRST_AVAILABLE_HORIZON_DAYS"]
NEXT_AVAILABLE_HORIZON_DAYS = _constants["NEXT_AVAILABLE_HORIZON_DAYS"]
CALENDAR_HORIZON_DAYS = _constants["CALENDAR_HORIZON_DAYS"]
MAX_SEARCH_HORIZON_DAYS = _constants["MAX_SEARCH_HORIZON_DAYS"]
SUGGESTED_DATES_COUNT = _constants["SUGGESTED_DATES_COUNT"]

# Candidate scoring
MATCH_REGION_POINTS = _constants["MATCH_REGION_POINTS"]
MATCH_AVAILABLE_POINTS = _constants["MATCH_AVAILABLE_POINTS"]
MATCH_LOAD_BASE_POINTS = _constants["MATCH_LOAD_BASE_POINTS"]
MATCH_LOAD_STEP_POINTS = _constants["MATCH_LOAD_STEP_POINTS"]
MATCH_SUGGESTED_COUNT = _constants["MATCH_SUGGESTED_COUNT"]

# Staffing risk
RISK_CRITICAL_HOURS = _constants["RISK_CRITICAL_HOURS"]
RISK_HIGH_DAYS = _constants["RISK_HIGH_DAYS"]
RISK_HIGH_STAFFING_PERCENT = _constants["RISK_HIGH_STAFFING_PERCENT"]

FALLBACK_BASE_PROBABILITY = _constants["FALLBACK_BASE_PROBABILITY"]
FALLBACK_GAP_WEIGHT = _constants["FALLBACK_GAP_WEIGHT"]
FALLBACK_NO_CANDIDATE = _constants["FALLBACK_NO_CANDIDATE"]
FALLBACK_ONE_CANDIDATE = _constants["FALLBACK_ONE_CANDIDATE"]
FALLBACK_FEWER_THAN_GAP = _constants["FALLBACK_FEWER_THAN_GAP"]
FALLBACK_SAME_DAY = _constants["FALLBACK_SAME_DAY"]
FALLBACK_NEXT_DAY = _constants["FALLBACK_NEXT_DAY"]
FALLBACK_WITHIN_THREE_DAYS = _constants["FALLBACK_WITHIN_THREE_DAYS"]

# Operator overload
OVERLOAD_SESSIONS = _constants["OVERLOAD_SESSIONS"]
OVERLOAD_HIGH_SESSIONS = _constants["OVERLOAD_HIGH_SESSIONS"]
OVERLOAD_CRITICAL_SESSIONS = _constants["OVERLOAD_CRITICAL_SESSIONS"]
