"""
Statutory thresholds and fixed vocabularies for lprtrack.

This module is the single source of truth for:
- Naturalization physical-presence requirements
- Continuous-residence and abandonment day thresholds
- Reentry-permit limits
- Compliance windows (I-751, renewal, Selective Service, tax)
- Priority ordering used when sorting compliance items

Values here are statutory and are not meant to be tuned. Tunable knobs
(reminder thresholds, safety buffers) live in lprtrack.config.
"""

# =============================================================================
# NATURALIZATION ELIGIBILITY
# =============================================================================
# Physical presence required for each eligibility path (half the period)

ELIGIBILITY_THREE_YEAR = "three_year"
ELIGIBILITY_FIVE_YEAR = "five_year"

REQUIRED_PRESENCE_DAYS = {
    ELIGIBILITY_THREE_YEAR: 548,
    ELIGIBILITY_FIVE_YEAR: 913,
}

ELIGIBILITY_YEARS = {
    ELIGIBILITY_THREE_YEAR: 3,
    ELIGIBILITY_FIVE_YEAR: 5,
}

# N-400 may be filed this many days before the eligibility date
EARLY_FILING_WINDOW_DAYS = 90

DAYS_PER_YEAR = 365


# =============================================================================
# CONTINUOUS RESIDENCE THRESHOLDS
# =============================================================================

CONTINUOUS_RESIDENCE_WARNING_DAYS = 150
CONTINUOUS_RESIDENCE_PRESUMPTION_DAYS = 180
CONTINUOUS_RESIDENCE_BREAK_DAYS = 365


# =============================================================================
# LPR STATUS (ABANDONMENT) THRESHOLDS
# =============================================================================

LPR_WARNING_DAYS = 150
LPR_PRESUMPTION_DAYS = 180
LPR_HIGH_RISK_DAYS = 330
LPR_AUTOMATIC_LOSS_DAYS = 365

# Cumulative days abroad within one calendar year that triggers a warning
CUMULATIVE_YEARLY_WARNING_DAYS = 180


# =============================================================================
# REENTRY PERMIT
# =============================================================================

REENTRY_PERMIT_MAX_DAYS = 730
REENTRY_PERMIT_WARNING_DAYS = 670
REENTRY_PERMIT_EXPIRY_WARNING_DAYS = 60

# N-470 preserves continuous residence for up to this many days abroad
N470_MAX_PROTECTED_DAYS = 730


# =============================================================================
# MAXIMUM TRIP CALCULATOR
# =============================================================================
# Largest safe trip length under each track (one day below the threshold)

MAX_SAFE_CONTINUOUS_RESIDENCE_DAYS = CONTINUOUS_RESIDENCE_WARNING_DAYS - 1
MAX_SAFE_LPR_DAYS = LPR_WARNING_DAYS - 1
MAX_SAFE_PERMIT_DAYS = REENTRY_PERMIT_WARNING_DAYS - 1

# Remaining-margin levels below which a warning is emitted
PHYSICAL_PRESENCE_MARGIN_WARNING_DAYS = 90
PERMIT_MARGIN_WARNING_DAYS = 60
LPR_MARGIN_WARNING_DAYS = 30


# =============================================================================
# REMOVAL OF CONDITIONS (I-751)
# =============================================================================

CONDITIONAL_CARD_YEARS = 2
REMOVAL_FILING_WINDOW_DAYS = 90


# =============================================================================
# GREEN CARD RENEWAL (I-90)
# =============================================================================

RENEWAL_WINDOW_MONTHS = 6
RENEWAL_URGENT_MONTHS = 2
RENEWAL_MEDIUM_MONTHS = 4


# =============================================================================
# SELECTIVE SERVICE
# =============================================================================

SELECTIVE_SERVICE_MIN_AGE = 18
SELECTIVE_SERVICE_MAX_AGE = 26


# =============================================================================
# TAX FILING
# =============================================================================
# (month, day) pairs; adjusted for weekends and the April 16 holiday

TAX_STANDARD_DEADLINE = (4, 15)
TAX_ABROAD_EXTENSION_DEADLINE = (6, 15)
TAX_OCTOBER_EXTENSION_DEADLINE = (10, 15)

# Emancipation Day, observed in Washington D.C.
TAX_HOLIDAY = (4, 16)

# Trips overlapping this window qualify for the abroad extension
TAX_SEASON_START = (1, 23)
TAX_SEASON_END = (4, 15)


# =============================================================================
# PRIORITY ORDERING
# =============================================================================

PRIORITY_ORDER = {
    "critical": 0,
    "high": 1,
    "medium": 2,
    "low": 3,
    "none": 4,
}

# Tie-break when priority and deadline are equal
COMPLIANCE_TYPE_ORDER = {
    "green_card_renewal": 0,
    "removal_of_conditions": 1,
    "selective_service": 2,
    "tax_filing": 3,
}


# =============================================================================
# TRAVEL ANALYTICS
# =============================================================================

# Year-over-year change (days) that counts as more or less travel
TRAVEL_TREND_SIGNIFICANT_DAYS = 20

TOP_DESTINATIONS_LIMIT = 5

UNKNOWN_LOCATION = "Unknown"


# =============================================================================
# TRAVEL PLANNING
# =============================================================================

# Remaining travel budget (days) at or below which the budget is flagged
TRAVEL_BUDGET_WARNING_DAYS = 30
TRAVEL_BUDGET_CAUTION_DAYS = 90

# Projection confidence: variance of yearly days abroad over recent years
PROJECTION_HIGH_VARIANCE = 900     # 30-day standard deviation
PROJECTION_MEDIUM_VARIANCE = 400   # 20-day standard deviation
PROJECTION_RECENT_YEARS = 3

# Reported when the historical absence rate makes eligibility unreachable
PROJECTION_FAR_FUTURE_DATE = (2099, 12, 31)


# =============================================================================
# PATTERN OF NON-RESIDENCE
# =============================================================================

PATTERN_MAX_PERCENT_ABROAD = 50
PATTERN_MAX_DAYS_ABROAD_PER_YEAR = 180
PATTERN_FREQUENT_TRIPS = 5
PATTERN_SHORT_RETURN_DAYS = 30
PATTERN_SHORT_STAY_DAYS = 90

# Weights summed into the LPR status risk score
RISK_WEIGHT_PATTERN = 3
RISK_WEIGHT_PRESUMPTION = 4
RISK_WEIGHT_CURRENTLY_ABROAD = 2
RISK_WEIGHT_EXPIRED_PERMIT = 2
RISK_WEIGHT_PENDING_I751 = 1

RISK_SCORE_AT_RISK = 4
RISK_SCORE_ABANDONED = 8

# Scores at which a reentry permit or an N-470 application is suggested
SUGGEST_REENTRY_PERMIT_SCORE = 3
SUGGEST_N470_SCORE = 2

# Permit expiry (days) close enough to prompt a return or renewal
REENTRY_PERMIT_RENEWAL_NOTICE_DAYS = 180
