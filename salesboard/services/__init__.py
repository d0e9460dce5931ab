"""Service layer for the Salesboard reporting service."""
from salesboard.services.reports import ReportService
from salesboard.services.seed_client import SeedClient, SeedFetchError
from salesboard.services.seeder import SeedService

__all__ = ["ReportService", "SeedClient", "SeedFetchError", "SeedService"]
