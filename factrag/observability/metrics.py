"""Prometheus instrumentation.

Every external call made while storing or answering facts is timed here:
embedding requests, chat completions and vector store operations. Timings
carry an ``outcome`` label, and a histogram's ``_count`` series doubles as
the call counter. API requests are labelled by route template, so fact ids
never become label values.
"""

import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware

NAMESPACE = "factrag"

UNMATCHED_ROUTE = "<unmatched>"

# API
HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "Time to serve an API request",
    ["method", "route", "status_code"],
    namespace=NAMESPACE,
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# External services
EMBEDDING_REQUEST_DURATION = Histogram(
    "embedding_request_duration_seconds",
    "Time for one embeddings API call",
    ["model", "outcome"],
    namespace=NAMESPACE,
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0],
)

COMPLETION_REQUEST_DURATION = Histogram(
    "completion_request_duration_seconds",
    "Time for one chat completion call",
    ["model", "outcome"],
    namespace=NAMESPACE,
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)

COMPLETION_TOKENS = Counter(
    "completion_tokens",
    "Tokens reported by the completion service",
    ["model", "kind"],  # prompt, completion
    namespace=NAMESPACE,
)

STORE_OPERATION_DURATION = Histogram(
    "store_operation_duration_seconds",
    "Time for one vector store call",
    ["operation", "outcome"],
    namespace=NAMESPACE,
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0],
)

# Answers
FACTS_RETRIEVED = Histogram(
    "facts_retrieved",
    "Facts returned for one question",
    namespace=NAMESPACE,
    buckets=[0, 1, 2, 3, 5, 10, 20],
)

TOP_FACT_SCORE = Histogram(
    "top_fact_score",
    "Similarity of the best fact for a question",
    namespace=NAMESPACE,
    buckets=[-0.5, 0.0, 0.25, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0],
)

ANSWERS = Counter(
    "answers",
    "Questions answered",
    ["outcome"],  # grounded, no_information
    namespace=NAMESPACE,
)


def _outcome(success: bool) -> str:
    return "success" if success else "error"


def route_template(request: Request) -> str:
    """Template of the route that served the request.

    ``/api/v1/facts/7`` is reported as ``/api/v1/facts/{fact_id}``. Paths
    that matched no route share one label.
    """
    route = request.scope.get("route")
    return getattr(route, "path", UNMATCHED_ROUTE)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Times every API request except scrapes of ``/metrics``."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)

        HTTP_REQUEST_DURATION.labels(
            method=request.method,
            route=route_template(request),
            status_code=str(response.status_code),
        ).observe(time.perf_counter() - start)

        return response


def get_metrics() -> bytes:
    """Current metrics in the Prometheus text format."""
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST


def track_llm_request(
    model: str,
    duration: float,
    prompt_tokens: int,
    completion_tokens: int,
    success: bool = True,
) -> None:
    """Record one chat completion call.

    Args:
        model: Completion model name.
        duration: Call duration in seconds.
        prompt_tokens: Prompt tokens reported by the service.
        completion_tokens: Completion tokens reported by the service.
        success: Whether the call returned an answer.
    """
    COMPLETION_REQUEST_DURATION.labels(model=model, outcome=_outcome(success)).observe(
        duration
    )
    if success:
        COMPLETION_TOKENS.labels(model=model, kind="prompt").inc(prompt_tokens)
        COMPLETION_TOKENS.labels(model=model, kind="completion").inc(completion_tokens)


def track_embedding_request(
    model: str,
    duration: float,
    success: bool = True,
) -> None:
    """Record one embeddings API call."""
    EMBEDDING_REQUEST_DURATION.labels(model=model, outcome=_outcome(success)).observe(
        duration
    )


def track_vectorstore_operation(
    operation: str,
    duration: float,
    success: bool = True,
) -> None:
    """Record one vector store call (upsert, retrieve, delete, search...)."""
    STORE_OPERATION_DURATION.labels(
        operation=operation,
        outcome=_outcome(success),
    ).observe(duration)


def track_retrieval_request(
    facts_returned: int,
    top_score: float | None,
) -> None:
    """Record how many facts a question found and how close the best was.

    ``top_score`` is None when nothing was found.
    """
    FACTS_RETRIEVED.observe(facts_returned)
    if top_score is not None:
        TOP_FACT_SCORE.observe(top_score)


def track_rag_query(answered: bool) -> None:
    """Count a question by whether it was answered from facts."""
    ANSWERS.labels(outcome="grounded" if answered else "no_information").inc()
