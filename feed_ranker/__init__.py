"""Recommendation and ranking service for the social feed."""

__version__ = "1.0.0"
