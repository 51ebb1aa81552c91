"""Scoring framework: category scorers, advanced audits and their registry."""
from src.audit.base import BaseScorer, Category, CategoryScore, Finding, FindingSeverity
from src.audit.registry import ScorerRegistry, build_advanced_registry, build_default_registry

__all__ = [
    "BaseScorer",
    "Category",
    "CategoryScore",
    "Finding",
    "FindingSeverity",
    "ScorerRegistry",
    "build_default_registry",
    "build_advanced_registry",
]
