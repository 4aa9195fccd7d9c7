"""
Specification models.

The in-memory Sloth document assembled from source comment directives.
"""

from slothcomments.specs.models import (
    DEFAULT_SPEC_VERSION,
    DEFAULT_WINDOW,
    SLI,
    AlertThreshold,
    Alerting,
    ServiceDeclaration,
    SLODeclaration,
    Specification,
)

__all__ = [
    "DEFAULT_SPEC_VERSION",
    "DEFAULT_WINDOW",
    "SLI",
    "AlertThreshold",
    "Alerting",
    "ServiceDeclaration",
    "SLODeclaration",
    "Specification",
]
