"""Resource store directories consumed by the orchestrator."""

from src.app.directories.base import BuildingDirectory, BuildingView, UnitDirectory, UnitView
from src.app.directories.sql import SqlBuildingDirectory, SqlUnitDirectory

__all__ = [
    "BuildingDirectory",
    "BuildingView",
    "SqlBuildingDirectory",
    "SqlUnitDirectory",
    "UnitDirectory",
    "UnitView",
]
