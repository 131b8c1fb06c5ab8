"""Jenkins controller bootstrap for Amazon Linux 2023 (Python-first, state-driven).

Core design goals:
- State-driven and resumable
- Idempotent steps
- Explicit fallback when the package repository is flaky
- Bounded readiness checks instead of fixed sleeps
- Centralized logging
"""

__all__ = []
