"""
Prometheus Metrics for gitwebhook

Metrics for the provider API traffic and for reconciliation outcomes. They
are registered on the default registry so the embedding process can expose
them alongside its own.
"""

import logging
import time
from contextlib import contextmanager
from importlib.metadata import version as get_version

from prometheus_client import Counter, Histogram, Info

logger = logging.getLogger(__name__)

# =============================================================================
# Application Info Metrics
# =============================================================================

# Installed distribution version
try:
    APP_VERSION = get_version("gitwebhook")
except Exception:
    APP_VERSION = "unknown"

app_info = Info("gitwebhook_app", "Application information")
app_info.info(
    {
        "version": APP_VERSION,
        "app_name": "gitwebhook",
    }
)

# =============================================================================
# Git Provider API Metrics
# =============================================================================

# Label "service" is the provider's service_name, e.g. "GitHub API"
git_api_requests_total = Counter(
    "gitwebhook_git_api_requests_total",
    "Requests sent to a git provider API",
    ["service", "method"],
)

git_api_errors_total = Counter(
    "gitwebhook_git_api_errors_total",
    "Transport failures and non-2xx responses from a git provider API",
    ["service"],
)

git_api_duration_seconds = Histogram(
    "gitwebhook_git_api_duration_seconds",
    "Git provider API round trip in seconds",
    ["service"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 15.0, 30.0),
)

git_api_rate_limited_total = Counter(
    "gitwebhook_git_api_rate_limited_total",
    "Responses signalling an exhausted provider rate limit",
    ["service"],
)

# =============================================================================
# Reconciliation Metrics
# =============================================================================

webhook_reconciliations_total = Counter(
    "gitwebhook_reconciliations_total",
    "Completed reconciliation calls by provider and resulting action",
    ["provider", "action"],
)

webhook_reconciliation_errors_total = Counter(
    "gitwebhook_reconciliation_errors_total",
    "Failed reconciliation calls by provider and error class",
    ["provider", "error"],
)

webhook_reconciliation_duration_seconds = Histogram(
    "gitwebhook_reconciliation_duration_seconds",
    "Time spent in a single reconciliation call",
    ["provider"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)


@contextmanager
def track_reconciliation(provider: str):
    """Context manager recording duration and error class of one reconciliation call."""
    start_time = time.time()
    try:
        yield
    except Exception as e:
        webhook_reconciliation_errors_total.labels(provider=provider, error=type(e).__name__).inc()
        raise
    finally:
        webhook_reconciliation_duration_seconds.labels(provider=provider).observe(time.time() - start_time)


def record_action(provider: str, action: str) -> None:
    webhook_reconciliations_total.labels(provider=provider, action=action).inc()
