"""Scoring and lifecycle engine.

Sub-modules:
- compatibility    – candidate ↔ project skill scoring
- recommendations  – ranked team recommendation + project metrics
- review_lifecycle – peer review state machine and score aggregation
- statistics       – review buckets, dashboard counters and notifications
"""
