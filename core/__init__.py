"""
Core modules for the depth seller.

This package contains:
- Per-feed price state and feed subscriptions (core.feed_state, core.feed)
- Execution dispatch and the periodic trader (core.execution, core.trader)
- Scheduler (core.clock) and startup settings (core.settings)
- Observability (core.observability)
"""
