"""Building combination planner for city slot layouts."""

__version__ = "0.1.0"
