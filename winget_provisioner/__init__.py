"""winget provisioner (Python-first, step-driven).

Core design goals:
- Idempotent steps (existence checks before every write)
- One explicit context threaded through every step
- Outcome values instead of exceptions for expected failures
- One error policy per run (fail-fast or best-effort)
- Centralized logging
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
