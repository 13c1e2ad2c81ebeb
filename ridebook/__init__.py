"""RideBook desktop client: passenger booking and rider dashboards over a REST API."""

__version__ = "0.1.0"
