"""
Load meter: per-tenant bucketed energy rollups for socket load telemetry.
"""

__version__ = "0.1.0"
