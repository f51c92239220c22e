"""Traffic light — dynamic threshold checks and status aggregation for catalog components."""

__version__ = "0.1.0"
