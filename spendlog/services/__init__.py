"""Services orchestrating the domain core and the ledger store."""

from spendlog.services.ingestion import IngestionResult, IngestionService, Outcome
from spendlog.services.query import QueryService

__all__ = ["IngestionResult", "IngestionService", "Outcome", "QueryService"]
