"""Data model and summarisation logic for security posture scan reports: statuses, per-resource results, control and framework summaries, counters, priority vectors and the posture report."""

__version__ = "0.1.0"