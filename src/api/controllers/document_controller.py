"""
Document controller handling HTTP requests/responses only.
"""

from fastapi import APIRouter, Depends, status

from api.dependencies import ServiceContainer, get_container
from api.exceptions import APIDocumentNotFoundError
from api.models.requests import SubmitDocumentRequest
from api.models.responses import DocumentStateResponse
from api.utils.error_utils import handle_domain_error
from core.exceptions import StorageException
from core.models.document import DocumentSubmissionResult

router = APIRouter(
    prefix="/documents",
    tags=["documents"],
)


@router.post(
    "/submit",
    response_model=DocumentSubmissionResult,
    status_code=status.HTTP_200_OK,
    summary="Submit document",
    description="Submit a DTE to the tax authority. Falls back to the contingency outbox when the authority is unavailable. Requires X-API-Token header for authentication.",
    responses={
        200: {
            "description": "Document submitted, queued in contingency or rejected by the authority",
            "model": DocumentSubmissionResult,
        },
        401: {
            "description": "Authentication failed - Invalid or missing X-API-Token header"
        },
        422: {"description": "Validation error - Invalid document or company data"},
        503: {"description": "Service unavailable - durable store not reachable"},
    },
)
async def submit_document(
    submit_request: SubmitDocumentRequest,
    container: ServiceContainer = Depends(get_container),
):
    try:
        return await container.submission_service.submit_document(
            submit_request.document, submit_request.company
        )
    except StorageException as e:
        return handle_domain_error(e)


@router.get(
    "/{document_id}",
    response_model=DocumentStateResponse,
    summary="Get document state",
    description="Current status and authority identifiers of a submitted document.",
    responses={404: {"description": "Document not found for the given id"}},
)
async def get_document(
    document_id: str, container: ServiceContainer = Depends(get_container)
):
    stored = await container.submission_service.get_document(document_id)
    if stored is None:
        return handle_domain_error(APIDocumentNotFoundError(document_id))

    return DocumentStateResponse(
        document=stored.document,
        company=stored.company,
        tracking=container.tracker.is_tracking(document_id),
    )
