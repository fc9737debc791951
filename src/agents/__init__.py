"""
Pipeline stages for WordTrend.

Contains the modules that move reviews through the pipeline:
- Ingestion Agent
- Tokenization
- Aggregation (Global + Yearly)
- Trend Fitting
- Trend Selection
"""
