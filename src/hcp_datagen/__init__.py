"""
HCP Datagen - Synthetic behavioral data for HCP engagement analytics.

This package generates an internally consistent, seed-reproducible dataset
of healthcare providers, their sales territories, marketing campaigns,
outbound touches, responses, prescribing history and message-saturation
analytics, persisted through a pluggable store (in-memory or PostgreSQL).
"""

__version__ = "0.1.0"
