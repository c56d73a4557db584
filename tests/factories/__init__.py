"""Test factories for generating test data.

Re-exports all factories for convenient imports:
    from tests.factories import PhaseFactory, ProcessFactory
"""

from tests.factories.base import BaseFactory, generate_uuid, utc_now
from tests.factories.process import PhaseFactory, ProcessFactory

__all__ = [
    # Base
    "BaseFactory",
    "generate_uuid",
    "utc_now",
    # Process engine
    "PhaseFactory",
    "ProcessFactory",
]
