"""Shared numeric constants and calibration defaults used across ratescal."""

gDaysInYear = 365.0  #: Days per year for ACT/365F year fractions

DEFAULT_TOLERANCE_ABS = 1e-9   #: Absolute root-finder tolerance
DEFAULT_TOLERANCE_REL = 1e-9   #: Relative root-finder tolerance
DEFAULT_MAX_STEPS = 1000       #: Root-finder iteration budget
