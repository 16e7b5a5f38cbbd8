"""Default wiring of the orchestration components."""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.app.directories.base import BuildingDirectory, UnitDirectory
from src.app.directories.sql import SqlBuildingDirectory, SqlUnitDirectory
from src.app.orchestration.cascade import CascadeDispatcher
from src.app.orchestration.engine import TransitionEngine
from src.app.orchestration.gates import GateEvaluator
from src.app.orchestration.ledger import StatusLedger
from src.app.orchestration.progress import ProgressPoller


@dataclass
class Orchestrator:
    engine: TransitionEngine
    gates: GateEvaluator
    poller: ProgressPoller
    cascade: CascadeDispatcher
    ledger: StatusLedger
    buildings: BuildingDirectory


def build_orchestrator(
    session_factory: async_sessionmaker[AsyncSession],
    buildings: BuildingDirectory | None = None,
    units: UnitDirectory | None = None,
    ledger: StatusLedger | None = None,
) -> Orchestrator:
    """Assemble the orchestration components over one session factory.

    `buildings`, `units` and `ledger` default to the SQL-backed stores;
    tests pass wrappers to inject failures.
    """
    buildings = buildings or SqlBuildingDirectory(session_factory)
    units = units or SqlUnitDirectory(session_factory)
    poller = ProgressPoller(units, buildings)
    gates = GateEvaluator(poller)
    ledger = ledger or StatusLedger(session_factory)
    engine = TransitionEngine(session_factory, buildings, gates, ledger)
    return Orchestrator(
        engine=engine,
        gates=gates,
        poller=poller,
        cascade=CascadeDispatcher(engine, poller),
        ledger=ledger,
        buildings=buildings,
    )
