"""
Backend package for the meal planner API.

This package provides a FastAPI application that proxies prompts to the
completion service, validates what comes back, and stores preferences,
saved plans and grocery items behind a database abstraction.
"""
