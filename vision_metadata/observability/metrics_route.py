from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
def metrics() -> Response:
    """
    Prometheus text exposition of every registered metric.
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
