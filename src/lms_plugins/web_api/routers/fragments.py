"""
Fragment Router
===============
HTML fragments loaded into modals without a full page render.
"""
from fastapi import APIRouter, Depends, HTTPException

from lms_plugins.exceptions import LmsError
from lms_plugins.host import Renderer
from lms_plugins.host.request import RequestState
from lms_plugins.quiz.fragments import FRAGMENTS
from lms_plugins.web_api.deps import get_renderer, get_request_state, http_error
from lms_plugins.web_api.schemas.fragment import FragmentRequest, FragmentResponse

router = APIRouter()


@router.post("/{component}/{callback}", response_model=FragmentResponse)
def load_fragment(
    component: str,
    callback: str,
    body: FragmentRequest,
    state: RequestState = Depends(get_request_state),
    output: Renderer = Depends(get_renderer),
):
    """
    Render the fragment `callback` of `component` in the given context.
    """
    function = FRAGMENTS.get((component, callback))
    if function is None:
        raise HTTPException(status_code=404, detail=f"Unknown fragment: {component}/{callback}")
    try:
        context = state.platform.get_context(body.contextid)
        html = function(state, output, context, body.args)
    except LmsError as e:
        raise http_error(e) from e
    return FragmentResponse(html=html)
