"""Daily lawn watering advisories driven by current weather."""

__version__ = "0.1.0"
