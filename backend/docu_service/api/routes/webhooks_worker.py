"""
Worker status webhook.

The external worker reports job progress here. When a webhook secret is
configured every callback must carry X-Worker-Signature, the hex
HMAC-SHA256 of the raw body keyed with that secret.
"""

import hashlib
import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError

from docu_service.api.dependencies.ingestion import get_reconciler, get_worker_settings
from docu_service.api.schemas.ingestion import WebhookResponse, WorkerStatusUpdateRequest
from docu_service.config.worker import WorkerSettings
from docu_service.ingestion.jobs.errors import InvalidTransitionError, JobNotFoundError
from docu_service.ingestion.jobs.reconciler import WorkerStatusReconciler

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/ingestion/webhook", tags=["webhooks"])

SIGNATURE_HEADER = "X-Worker-Signature"

_unsigned_warning_logged = False


def compute_worker_signature(data: bytes, secret: str) -> str:
    """Hex HMAC-SHA256 of a webhook body."""
    return hmac.new(secret.encode("utf-8"), data, hashlib.sha256).hexdigest()


def verify_worker_signature(
    data: bytes,
    signature_header: Optional[str],
    secret: str,
) -> bool:
    """
    Verify a worker webhook signature.

    Args:
        data: Raw request body bytes
        signature_header: X-Worker-Signature header value
        secret: Shared webhook secret

    Returns:
        True if signature is valid, False otherwise
    """
    if not signature_header or not secret:
        return False

    computed = compute_worker_signature(data, secret)
    return hmac.compare_digest(computed, signature_header.strip().lower())


async def get_verified_status_update(
    request: Request,
    settings: WorkerSettings = Depends(get_worker_settings),
) -> WorkerStatusUpdateRequest:
    """
    Read, authenticate and validate the webhook body.

    Raises:
        HTTPException: 401 on a missing/invalid signature, 422 on a malformed body
    """
    global _unsigned_warning_logged

    body = await request.body()

    if settings.requires_signed_webhooks:
        signature = request.headers.get(SIGNATURE_HEADER)
        if not signature:
            logger.warning("Missing signature header in worker webhook")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Missing webhook signature",
            )
        if not verify_worker_signature(body, signature, settings.webhook_secret):
            logger.warning("Invalid worker webhook signature")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid webhook signature",
            )
    elif not _unsigned_warning_logged:
        logger.warning(
            "INGESTION_WEBHOOK_SECRET not configured - accepting unsigned worker callbacks"
        )
        _unsigned_warning_logged = True

    try:
        return WorkerStatusUpdateRequest.model_validate_json(body)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=jsonable_encoder(e.errors(include_url=False)),
        )


@router.post(
    "/status-update",
    response_model=WebhookResponse,
    summary="Worker status callback",
    responses={
        400: {"description": "Unknown status or transition not allowed"},
        401: {"description": "Missing or invalid signature"},
        404: {"description": "No job carries the reported worker id"},
    },
)
async def worker_status_update(
    update: WorkerStatusUpdateRequest = Depends(get_verified_status_update),
    reconciler: WorkerStatusReconciler = Depends(get_reconciler),
):
    logger.info(
        "Worker status update received",
        extra={"external_job_id": update.external_job_id, "reported_status": update.status},
    )

    try:
        job = await reconciler.apply_status_update(
            update.external_job_id,
            update.status,
            update.result,
        )
    except JobNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidTransitionError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return WebhookResponse(
        received=True,
        message="Status update applied",
        job_id=job.id,
        status=job.status.value,
    )
