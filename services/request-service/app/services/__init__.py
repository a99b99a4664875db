"""
Service layer - Business logic orchestration.

Services compose the validators with a repository and never touch the
database directly.
"""
