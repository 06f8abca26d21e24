"""
Unit tests for Capture Flow.

Test individual components in isolation:
- Data models (policy validation, record invariants, metrics)
- Backoff calculator (growth, cap, jitter bounds)
- Timeout guard (deadline, cancellation, detached mode)
- Error classifier (typed path, marker fallback)
- Execution history (ordering, derived views)
- Orchestrator (state machine with mocked collaborators)
- Cache adapter and stores, HTTP capture provider
"""
