"""
lprtrack: day-counting, risk and deadline engine for U.S. permanent residents.

Subpackages:
    core: trip day counting, physical presence, abandonment risk, maximum trip
    compliance: I-751, I-90, Selective Service and tax deadlines
    schemas: pydantic input models for the validated entry points
    utils: calendar arithmetic and serialization

Modules:
    analytics: pandas summaries of a travel history
    planning: travel budget, planned-trip risk, eligibility projection, milestones
    safe: Result-returning wrappers around every public calculation
    config: EngineConfig (thresholds, buffers, log level)
    errors: error taxonomy and Ok/Err results

Every calculation is pure: inputs in, a new result value out.
"""

from lprtrack.config import DEFAULT_CONFIG, EngineConfig, configure_logging
from lprtrack.core.models import (
    EligibilityCategory,
    Gender,
    LPRProfile,
    ReentryPermit,
    Trip,
)
from lprtrack.errors import (
    CalculationError,
    ComplianceCalculationError,
    DateFormatError,
    DateRangeError,
    DomainValidationError,
    Err,
    LPRStatusError,
    LPRTrackError,
    Ok,
    TripValidationError,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Config
    "EngineConfig",
    "DEFAULT_CONFIG",
    "configure_logging",
    # Inputs
    "Trip",
    "ReentryPermit",
    "LPRProfile",
    "EligibilityCategory",
    "Gender",
    # Errors
    "LPRTrackError",
    "DateFormatError",
    "DateRangeError",
    "TripValidationError",
    "DomainValidationError",
    "CalculationError",
    "LPRStatusError",
    "ComplianceCalculationError",
    "Ok",
    "Err",
]
