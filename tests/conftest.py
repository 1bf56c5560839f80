"""Pytest configuration for path tracer tests.

Taichi must be initialized once per session before any field, scene or
camera is created.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture
def room():
    """The reference room scene and its camera."""
    from sphere_pathtracer.scene.room import create_room_scene

    return create_room_scene()
