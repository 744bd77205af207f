"""
Status tracking controller handling HTTP requests/responses only.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from api.dependencies import ServiceContainer, get_container
from api.models.responses import StopTrackingResponse, TrackingStatusResponse

router = APIRouter(
    prefix="/tracking",
    tags=["tracking"],
)


@router.get(
    "",
    response_model=TrackingStatusResponse,
    summary="Tracked documents",
    description="Documents whose status is being polled and their failed poll counters.",
)
async def get_tracking(container: ServiceContainer = Depends(get_container)):
    tracker = container.tracker
    stats = tracker.get_tracking_stats()
    return TrackingStatusResponse(
        **stats.model_dump(), document_ids=tracker.get_tracked_document_ids()
    )


@router.delete(
    "/{document_id}",
    response_model=StopTrackingResponse,
    summary="Stop tracking a document",
    responses={404: {"description": "Document is not being tracked"}},
)
async def stop_tracking(
    document_id: str, container: ServiceContainer = Depends(get_container)
):
    if not await container.tracker.forget_tracking(document_id):
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Document is not being tracked")
    return StopTrackingResponse(stopped_count=1)


@router.delete(
    "",
    response_model=StopTrackingResponse,
    summary="Stop tracking every document",
)
async def stop_all_tracking(container: ServiceContainer = Depends(get_container)):
    return StopTrackingResponse(stopped_count=container.tracker.stop_all_tracking())
