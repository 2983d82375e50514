"""Domain models for the rate updater.

Pydantic and dataclass types describing currency pairs, resolved rate records
and operator overrides. They are independent from persistence models so that
rate resolution can be tested without a database.
"""

__all__ = [
    "rates",
]
