"""
Prometheus Metrics for the depth seller.

Covers feed updates, gating decisions and execution outcomes.
"""

from prometheus_client import Counter, Gauge, Histogram, Info

# ============================================================================
# COUNTERS (monotonically increasing)
# ============================================================================

# Feeds
feed_updates_total = Counter(
    "feed_updates_total",
    "Total order book updates applied per feed",
    ["feed", "result"],
)

feed_errors_total = Counter(
    "feed_errors_total",
    "Total errors raised by feed sources",
    ["feed"],
)

# Decisions
decisions_total = Counter(
    "decisions_total",
    "Total gating decisions taken",
    ["action"],
)

skip_reasons_total = Counter(
    "skip_reasons_total",
    "Total skip reasons recorded (one decision can carry several)",
    ["reason"],
)

# Executions
executions_total = Counter(
    "executions_total",
    "Total execution attempts by outcome",
    ["outcome"],
)

# ============================================================================
# GAUGES (can go up and down)
# ============================================================================

feed_value = Gauge(
    "feed_value",
    "Latest weighted value per feed (NaN when absent)",
    ["feed"],
)

price_divergence = Gauge(
    "price_divergence",
    "Executable / reference ratio at the last evaluation",
)

execution_sequence = Gauge(
    "execution_sequence",
    "Current execution sequence number",
)

# ============================================================================
# HISTOGRAMS (distribution of values)
# ============================================================================

execution_latency_seconds = Histogram(
    "execution_latency_seconds",
    "Gateway submission latency in seconds",
    ["outcome"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)

# ============================================================================
# INFO (static labels)
# ============================================================================

bot_info = Info(
    "bot_info",
    "Seller version and configuration",
)


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================


def record_feed_update(feed: str, result: str, value: float = None):
    """Record a feed update ('changed', 'unchanged' or 'insufficient')."""
    feed_updates_total.labels(feed=feed, result=result).inc()
    feed_value.labels(feed=feed).set(float("nan") if value is None else value)


def record_feed_error(feed: str):
    """Record a feed source error."""
    feed_errors_total.labels(feed=feed).inc()


def record_decision(action: str, reasons=(), divergence: float = None):
    """Record a gating decision and its skip reasons."""
    decisions_total.labels(action=action).inc()
    for reason in reasons:
        skip_reasons_total.labels(reason=reason).inc()
    if divergence is not None:
        price_divergence.set(divergence)


def record_execution(outcome: str, elapsed_seconds: float, sequence: int):
    """Record an execution attempt."""
    executions_total.labels(outcome=outcome).inc()
    execution_latency_seconds.labels(outcome=outcome).observe(elapsed_seconds)
    execution_sequence.set(sequence)
