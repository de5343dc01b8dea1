"""MaaS Evaluation MCP Server.

Score a marriage-market questionnaire, place it on the population curve,
grade it into a tier, and gate tier-based profile browsing by subscription.
"""

__version__ = "0.1.0"

from .core.evaluation import evaluate

__all__ = ["evaluate"]
