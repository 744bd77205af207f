"""
Maps the authority's status vocabulary onto DocumentStatus.
"""

from core.models.document import DocumentStatus

_STATUS_MAP = {
    "procesado": DocumentStatus.COMPLETED,
    "autorizado": DocumentStatus.COMPLETED,
    "completado": DocumentStatus.COMPLETED,
    "rechazado": DocumentStatus.VOIDED,
    "anulado": DocumentStatus.VOIDED,
    "invalidado": DocumentStatus.VOIDED,
    "procesando": DocumentStatus.SUBMITTING,
    "en_proceso": DocumentStatus.SUBMITTING,
    "pendiente": DocumentStatus.SUBMITTING,
    "modificado": DocumentStatus.MODIFIED,
}


def map_authority_status(raw_status: str) -> DocumentStatus:
    """Unknown statuses are treated as still processing."""
    return _STATUS_MAP.get(
        (raw_status or "").strip().lower(), DocumentStatus.SUBMITTING
    )
