"""Query workflow API routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sse_starlette.sse import EventSourceResponse

from sageql.api.dependencies import get_query_use_case
from sageql.application.query.dto import QueryRequest, QueryResponse
from sageql.application.query.use_case import QueryWorkflowUseCase, SchemaUnavailableError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/query", tags=["query"])


@router.post("", response_model=None)
async def run_query(
    query_request: QueryRequest,
    use_case: QueryWorkflowUseCase = Depends(get_query_use_case),
    stream: bool = False,
) -> QueryResponse | EventSourceResponse:
    """Run the query workflow. Use stream=true for SSE streaming."""
    if stream:
        return _stream_response(query_request, use_case)
    try:
        return await use_case.execute(query_request)
    except SchemaUnavailableError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception("Query workflow failed")
        raise HTTPException(status_code=500, detail="Query workflow failed")


def _stream_response(
    query_request: QueryRequest,
    use_case: QueryWorkflowUseCase,
) -> EventSourceResponse:
    """Return SSE stream of workflow events."""

    async def event_generator():
        try:
            async for evt in use_case.execute_stream(query_request):
                yield {"event": evt.event_type, "data": evt.model_dump_json()}
        except SchemaUnavailableError as e:
            yield {"event": "error", "data": str(e)}
        except Exception:
            logger.exception("Query stream failed")
            yield {"event": "error", "data": "Stream failed"}
        yield {"event": "close", "data": ""}

    return EventSourceResponse(event_generator())
