"""Error types raised by the report pipeline."""


class FraudReportError(Exception):
    """Base class for all report pipeline errors."""


class DataLoadError(FraudReportError, OSError):
    """Input file exists but could not be read as a transaction table."""


class SchemaError(FraudReportError, ValueError):
    """Input data does not match the expected transaction schema."""


class DegenerateSplitError(FraudReportError, ValueError):
    """A split or resample cannot be built from the given data."""


class ConfigError(FraudReportError, ValueError):
    """A configuration value is out of range or unknown."""
