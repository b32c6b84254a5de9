"""Business services for sigdoc."""

from sigdoc.services.enrichment_service import EnrichmentService, EnrichResult

__all__ = [
    "EnrichResult",
    "EnrichmentService",
]
