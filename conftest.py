"""
Pytest configuration: memory guard and shared simulation fixtures.
"""

import psutil
import pytest

from sfcollapse.core import PhysicalParameters, create_radial_grid
from sfcollapse.core.performance import reset_performance_stats


@pytest.fixture(autouse=True)
def memory_check_per_test():
    """Check memory before each test and provide warnings."""
    process = psutil.Process()
    initial_memory = process.memory_info().rss / (1024**2)  # MB

    if initial_memory > 1000:  # Warning if over 1GB before test
        print(f"\nWARNING: Starting test with {initial_memory:.0f} MB memory usage")

    yield

    final_memory = process.memory_info().rss / (1024**2)  # MB
    memory_increase = final_memory - initial_memory

    if memory_increase > 500:  # Warning if test increased memory by 500MB+
        print(f"\nWARNING: Test increased memory by {memory_increase:.0f} MB")


@pytest.fixture(autouse=True)
def isolated_workdir(tmp_path, monkeypatch):
    """Run every test in its own directory so rescaling_values.dat never leaks."""
    monkeypatch.chdir(tmp_path)
    reset_performance_stats()
    yield tmp_path


@pytest.fixture
def spherical_grid():
    """Spherical grid on [0, 20] with dx = 0.05."""
    return create_radial_grid(401, r_max=20.0)


@pytest.fixture
def sinh_grid():
    """Compactified grid reaching r = 20 with W = 0.2."""
    return create_radial_grid(
        401, coordinate_system="sinh_spherical", sinh_width=0.2, sinh_amplitude=20.0
    )


@pytest.fixture
def weak_pulse():
    """Small-amplitude Gaussian shell centered at r = 5."""
    return PhysicalParameters(amplitude=0.01, width=1.0, center=5.0, lapse_rescaling=False)
