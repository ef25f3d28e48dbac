"""
Service Router
==============
The batched AJAX web-service endpoint.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends

from lms_plugins.host import Renderer
from lms_plugins.host.request import RequestState
from lms_plugins.services import execute_batch
from lms_plugins.web_api.deps import get_renderer, get_request_state
from lms_plugins.web_api.schemas.service import ServiceCall, ServiceResult

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/service", response_model=List[ServiceResult])
def run_services(
    calls: List[ServiceCall],
    state: RequestState = Depends(get_request_state),
    output: Renderer = Depends(get_renderer),
):
    """
    Run a batch of web-service calls in order.

    Each call reports `{error: false, data}` or `{error: true, exception}`;
    after the first failure the remaining calls are skipped.
    """
    ordered = sorted(calls, key=lambda c: c.index)
    logger.debug("user %s: %s", state.user.id, [c.methodname for c in ordered])
    return execute_batch(state, output, [c.model_dump() for c in ordered])
