"""Estimation stages: classification, truncation, limit fit and confidence."""
