"""Lifecycle event classification."""

from .classifier import EventClassifier

__all__ = ["EventClassifier"]
