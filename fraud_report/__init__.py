"""Credit card fraud exploratory analysis and model comparison report."""

__version__ = "0.1.0"
