"""Test factories for generating test data.

Re-exports all factories for convenient imports:
    from tests.factories import BuildingFactory, UnitFactory, ...
"""

from tests.factories.base import BaseFactory, generate_uuid, utc_now
from tests.factories.building import BuildingFactory, UnitFactory
from tests.factories.deletion_request import DeletionRequestFactory

__all__ = [
    # Base
    "BaseFactory",
    "generate_uuid",
    "utc_now",
    # Building
    "BuildingFactory",
    "UnitFactory",
    # Deletion request
    "DeletionRequestFactory",
]
