"""HTTP route definitions for the service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.concurrency import run_in_threadpool
from starlette.requests import ClientDisconnect

from datastore.base import StorageWriteError
from services.ingestion import IngestionService, build_default_ingestion_service
from services.transform import IngestionError

router = APIRouter()


def get_ingestion_service() -> IngestionService:
    return build_default_ingestion_service()


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/", summary="Receive a push notification carrying one climate reading.")
@router.post("/{path:path}", include_in_schema=False)
async def receive_notification(
    request: Request,
    service: IngestionService = Depends(get_ingestion_service),
) -> Response:
    try:
        body = await request.body()
    except ClientDisconnect as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Client disconnected before the request body was read.",
        ) from exc

    try:
        await run_in_threadpool(service.ingest, body)
    except IngestionError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except StorageWriteError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc
    return Response(status_code=status.HTTP_200_OK)
