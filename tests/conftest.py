"""Pytest configuration for phongtrace tests.

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
def clear_all_scene_data():
    """Clear scene data before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here to avoid circular imports and ensure Taichi is initialized
    from phongtrace.core.integrator import clear_render_target
    from phongtrace.materials.phong import clear_phong_materials
    from phongtrace.scene.intersection import clear_scene
    from phongtrace.scene.light import clear_light

    def _clear_all():
        clear_scene()
        clear_phong_materials()
        clear_light()
        clear_render_target()

    _clear_all()
    yield
    _clear_all()


@pytest.fixture
def red_material():
    """The diffuse red material of the default scene."""
    from phongtrace.materials.phong import PhongMaterial

    return PhongMaterial(
        ambient=(0.2, 0.0, 0.0),
        diffuse=(1.0, 0.0, 0.0),
        specular=(0.0, 0.0, 0.0),
        specular_power=0.0,
    )


@pytest.fixture
def grey_material():
    """The diffuse floor material of the default scene."""
    from phongtrace.materials.phong import PhongMaterial

    return PhongMaterial(ambient=(0.2, 0.2, 0.2), diffuse=(1.0, 1.0, 1.0))
