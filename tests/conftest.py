"""Pytest configuration and fixtures for exporter tests."""

import os

# Portrait rendering must never try to open a window
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

import pytest


@pytest.fixture
def colony():
    """Provide a deterministic demo colony with a job for every colonist."""
    from core.demo_colony import DemoColony

    world = DemoColony(seed=42, colonists=3)
    world.step()
    return world


@pytest.fixture
def settings():
    """Settings with every section on, independent of the environment."""
    from backend.settings import ExportSettings

    return ExportSettings(
        enable_sending=True,
        enable_world=True,
        enable_pawns=True,
        enable_skills=True,
        enable_jobs=True,
        enable_needs=True,
        enable_health=True,
        enable_portraits=True,
        enable_debug=False,
        host="localhost",
        port=5500,
        timeout_seconds=1.0,
    )


@pytest.fixture
def run_inline():
    """Spawner that runs a cycle's background work synchronously."""

    def spawn(work, name):
        work()

    return spawn
