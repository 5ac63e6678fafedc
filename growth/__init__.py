"""
Growth models: closed-form period scaling of base values.
"""

from .evaluator import project, growth_for_driver, spend_growth_for_driver, driver_growth_model

__all__ = [
    "project",
    "growth_for_driver",
    "spend_growth_for_driver",
    "driver_growth_model",
]
