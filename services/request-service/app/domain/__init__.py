"""
Domain layer - Core business entities and domain logic.

This layer contains item requests, their lifecycle status and the
error taxonomy, independent of any infrastructure or framework concerns.
"""
