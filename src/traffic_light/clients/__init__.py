"""HTTP adapters for the catalog and Tech Insights backends."""

from traffic_light.clients.catalog import CatalogClient
from traffic_light.clients.tech_insights import TechInsightsClient

__all__ = ["CatalogClient", "TechInsightsClient"]
