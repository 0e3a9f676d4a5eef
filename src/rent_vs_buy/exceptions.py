from __future__ import annotations


class DomainError(ValueError):
    """Raised when an input combination makes one of the model formulas undefined."""
