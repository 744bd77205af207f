"""
Tax authority submission clients.
"""

from core.services.submission.client import SubmissionClient
from core.services.submission.hacienda_client import HaciendaAPIClient
from core.services.submission.status_mapping import map_authority_status

__all__ = ["SubmissionClient", "HaciendaAPIClient", "map_authority_status"]
