"""
Capture Flow: resilient execution orchestrator.

Drives a capture -> cache -> stream clone workflow to completion under
unreliable conditions:
- Bounded retries with exponential backoff and jitter
- Per-operation timeouts with cancellation
- Retryable vs. fatal error classification
- Best-effort artifact caching (Redis or in-memory)
- Append-only execution history with derived metrics

Architecture: asyncio orchestrator + pluggable collaborators (capture, stream, cache)
"""

__version__ = "0.1.0"
