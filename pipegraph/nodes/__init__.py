"""
Nodes Module

Reusable nodes for shaping values between stages.
"""

from .branching import Duplicate, Identity

__all__ = [
    "Duplicate",
    "Identity",
]
