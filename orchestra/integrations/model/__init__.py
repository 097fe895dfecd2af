"""
Model-call integration.
"""

from orchestra.integrations.model.adapter import ModelCall, ModelToolAdapter

__all__ = ["ModelCall", "ModelToolAdapter"]
