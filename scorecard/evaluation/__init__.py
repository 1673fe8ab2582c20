"""Evaluation module - scoring and bias detection."""

from scorecard.evaluation.scoring import ScoringEngine
from scorecard.evaluation.bias import BiasDetector, BiasReview

__all__ = [
    "ScoringEngine",
    "BiasDetector",
    "BiasReview",
]
