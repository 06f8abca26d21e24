"""
Integration tests for Capture Flow.

Test components together or against real external services:
- Full orchestrator flow (real classifier, ledger, adapter, in-memory cache)
- Redis cache store (real server, skipped when unreachable)
"""
