"""
Page modules for the dashboard.
"""

from . import portfolio, glm_model, model_comparison

__all__ = ["portfolio", "glm_model", "model_comparison"]
