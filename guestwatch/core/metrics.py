from typing import Optional

from fastapi import FastAPI
from prometheus_client import Counter
from prometheus_fastapi_instrumentator import Instrumentator
from prometheus_fastapi_instrumentator.metrics import default, request_size, response_size

# Label values come from DispatchOutcome, so cardinality stays fixed
DISPATCH_OUTCOMES = Counter(
    "guestwatch_dispatch_outcomes_total",
    "Watchlist dispatches by the step they finished at",
    ["outcome"],
)

DISPATCH_SUBMISSIONS = Counter(
    "guestwatch_dispatch_submissions_total",
    "Watchlist checks handed to a dispatch backend",
    ["backend", "result"],
)

BROADCAST_FAILURES = Counter(
    "guestwatch_broadcast_failures_total",
    "Socket emits that failed, by event",
    ["event"],
)


def init_metrics(app: FastAPI, enabled: bool = True, endpoint: str = "/metrics") -> Optional[Instrumentator]:
    """Instrument HTTP handlers and expose the Prometheus endpoint.

    Groups by handler/method/status; no per-request labels.
    """
    if not enabled:
        return None

    instr = (
        Instrumentator(
            should_group_status_codes=True,
            should_ignore_untemplated=True,
            excluded_handlers={"/health", "/docs", "/redoc", "/openapi.json", endpoint},
        )
        .add(default())
        .add(request_size())
        .add(response_size())
    )

    instr.instrument(app).expose(app, endpoint=endpoint, include_in_schema=False)
    return instr
