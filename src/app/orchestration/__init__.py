"""Tenant deletion orchestration core.

Import submodules directly, e.g. `from src.app.orchestration.engine import
TransitionEngine`. `factory.build_orchestrator` wires the SQL-backed stack.
"""
