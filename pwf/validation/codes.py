"""Stable diagnostic codes.

Codes are public API: a published code never changes meaning and retired
codes are not reused.
"""

# Plan: meta
INVALID_ACTIVATED_AT = "PWF-P001"
INVALID_COMPLETED_AT = "PWF-P002"
ACTIVE_WITHOUT_ACTIVATED_AT = "PWF-P003"
COMPLETED_WITHOUT_COMPLETED_AT = "PWF-P004"
ACTIVATED_NOT_BEFORE_COMPLETED = "PWF-P005"

# Plan: glossary
GLOSSARY_TOO_LARGE = "PWF-P006"
GLOSSARY_TERM_LENGTH = "PWF-P007"
GLOSSARY_TERM_CHARSET = "PWF-P008"
GLOSSARY_DEFINITION_EMPTY = "PWF-P009"
GLOSSARY_DEFINITION_TOO_LONG = "PWF-P010"

# Plan: loading
PERCENT_WITHOUT_PERCENT_OF = "PWF-P011"
PERCENT_OF_WITHOUT_PERCENT = "PWF-P012"
LOAD_CONFLICTS_WITH_PERCENT = "PWF-P013"
PERCENT_OUT_OF_RANGE = "PWF-P014"
REFERENCE_WITHOUT_PERCENT = "PWF-P015"
REFERENCE_EXERCISE_NOT_FOUND = "PWF-P016"

# Plan: grouping
GROUP_WITHOUT_TYPE = "PWF-P017"
GROUP_TYPE_WITHOUT_GROUP = "PWF-P018"
INVALID_GROUP_ID = "PWF-P019"

# Plan: structure
MISSING_META = "PWF-P020"
INVALID_TITLE = "PWF-P021"
UNSUPPORTED_PLAN_VERSION = "PWF-P022"
NO_DAYS = "PWF-P023"
DUPLICATE_DAY_ORDER = "PWF-P024"
DAY_WITHOUT_EXERCISES = "PWF-P025"
EXERCISE_WITHOUT_NAME = "PWF-P026"
MODALITY_TARGET_MISSING = "PWF-P027"
INVALID_LINK = "PWF-P028"
INSECURE_IMAGE = "PWF-P029"

# Plan: exercise library
MISSING_MODALITY_AND_REF = "PWF-P030"
MODALITY_AND_REF_BOTH_SET = "PWF-P031"
UNRESOLVED_EXERCISE_REF = "PWF-P032"
LIBRARY_TOO_LARGE = "PWF-P033"
DUPLICATE_LIBRARY_ID = "PWF-P034"
INVALID_LIBRARY_ID = "PWF-P035"
INVALID_LIBRARY_NAME = "PWF-P036"
LIBRARY_DESCRIPTION_TOO_LONG = "PWF-P037"
V2_FEATURE_ON_V1 = "PWF-P038"
UNRESOLVED_TEMPLATE_REF = "PWF-P039"

# Plan: progression rules
PROGRESSION_ON_V1 = "PWF-P040"
PROGRESSION_ON_NON_STRENGTH = "PWF-P041"
LINEAR_WITHOUT_INCREMENT = "PWF-P042"
INCREMENT_BOTH_UNITS = "PWF-P043"
REPS_RANGE_ON_LINEAR = "PWF-P044"
DOUBLE_WITHOUT_REPS_RANGE = "PWF-P045"
DOUBLE_WITHOUT_INCREMENT = "PWF-P046"
REPS_RANGE_MIN_NOT_BELOW_MAX = "PWF-P047"
REPS_RANGE_MIN_ZERO = "PWF-P048"
REPS_RANGE_MAX_HIGH = "PWF-P049"
INCREMENT_KG_NEGATIVE = "PWF-P050"
INCREMENT_KG_LARGE = "PWF-P051"
INCREMENT_LBS_NEGATIVE = "PWF-P052"
INCREMENT_LBS_LARGE = "PWF-P053"
DELOAD_PERCENT_OUT_OF_RANGE = "PWF-P054"
DELOAD_WEEKS_ZERO = "PWF-P055"
DELOAD_WEEKS_LONG = "PWF-P056"
MAX_WEIGHT_BOTH_UNITS = "PWF-P057"
MAX_WEIGHT_KG_NEGATIVE = "PWF-P058"
MAX_WEIGHT_LBS_NEGATIVE = "PWF-P059"
REPS_INCREMENT_ZERO = "PWF-P060"
REPS_INCREMENT_LARGE = "PWF-P061"
DELOAD_CONDITION_WITHOUT_PERCENT = "PWF-P062"

# History: document
INVALID_HISTORY_VERSION = "PWF-H001"
MISSING_EXPORTED_AT = "PWF-H002"
V2_FIELDS_ON_V1 = "PWF-H003"

# History: workouts, exercises, sets
MISSING_WORKOUT_DATE = "PWF-H101"
NO_EXERCISES = "PWF-H102"
INVALID_WORKOUT_DATE = "PWF-H103"
MISSING_EXERCISE_NAME = "PWF-H201"
NO_SETS = "PWF-H202"
NO_METRICS = "PWF-H301"
RPE_OUT_OF_RANGE = "PWF-H302"
RIR_OUT_OF_RANGE = "PWF-H303"
RPE_RIR_BOTH_SET = "PWF-H304"

# History: personal records and body measurements
MISSING_PR_EXERCISE = "PWF-H401"
MISSING_PR_DATE = "PWF-H402"
PR_MISSING_UNIT = "PWF-H403"
MISSING_BM_DATE = "PWF-H501"
NO_BM_VALUES = "PWF-H502"

# History: units
WEIGHT_UNITS_MISMATCH = "PWF-H601"

# History: telemetry ranges
HEART_RATE_OUT_OF_RANGE = "PWF-H701"
NEGATIVE_POWER = "PWF-H702"
CADENCE_OUT_OF_RANGE = "PWF-H703"
NON_POSITIVE_PACE = "PWF-H704"
NEGATIVE_ELEVATION_CHANGE = "PWF-H705"
HUMIDITY_OUT_OF_RANGE = "PWF-H706"
TEMPERATURE_OUT_OF_RANGE = "PWF-H707"
NEGATIVE_SPEED = "PWF-H708"
DISTANCE_UNITS_MISMATCH = "PWF-H709"
NEGATIVE_DISTANCE = "PWF-H710"

# History: swimming
SWOLF_MISMATCH = "PWF-H801"
INVALID_POOL_CONFIG = "PWF-H802"

# History: time series
TIME_SERIES_LENGTH_MISMATCH = "PWF-H821"

# History: multi-sport
SEGMENT_INDEX_GAP = "PWF-H841"
DUPLICATE_SEGMENT_INDEX = "PWF-H842"
TRANSITION_SPORT_MISMATCH = "PWF-H861"

# History: zones
ZONE_LENGTH_MISMATCH = "PWF-H871"

# History: GPS
LATITUDE_OUT_OF_RANGE = "PWF-H881"
LONGITUDE_OUT_OF_RANGE = "PWF-H882"
HEADING_OUT_OF_RANGE = "PWF-H883"

# History: advanced and power metrics
TRAINING_EFFECT_OUT_OF_RANGE = "PWF-H891"
PERFORMANCE_CONDITION_OUT_OF_RANGE = "PWF-H892"
INTENSITY_FACTOR_MISMATCH = "PWF-H893"
VARIABILITY_INDEX_MISMATCH = "PWF-H894"
