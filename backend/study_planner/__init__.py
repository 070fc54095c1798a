"""Application package for the study planner backend.

This package exposes the model, schema and repository modules used by
the FastAPI application in `study_planner.main`. It is intentionally
lightweight; individual modules contain the concrete implementations
and documentation.
"""
