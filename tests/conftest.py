"""Pytest configuration for sdfmarch tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
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


@pytest.fixture(autouse=True)
def clear_device_state():
    """Clear the device scene and render target before and after each test."""
    # Import here so the fields are allocated after ti.init()
    from sdfmarch.scene.distance_field import clear_scene

    def _clear_all():
        clear_scene()

        try:
            from sdfmarch.core.integrator import clear_render_target

            clear_render_target()
        except (ImportError, RuntimeError):
            pass

    _clear_all()
    yield
    _clear_all()
