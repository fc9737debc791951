"""
Utility modules for WordTrend.

Cross-cutting concerns:
- Storage: CSV dump/reload for every pipeline stage
- Stop words: display-time membership test
"""
