"""Data access managers for the worker-model catalog.

Each module provides async functions that encapsulate queries and the
mutation sequence.  Managers accept ``AsyncSession`` as a parameter and
raise domain exceptions from ``hatchery.catalog.errors``, never HTTP
exceptions -- that translation is the router's responsibility.
"""
