"""
Integration tests for the evolution engine.

These run short evolutions on coarse grids and check the properties that
must hold on every slice: regularity at the origin, flatness of vacuum,
sign of the metric deviation, mass conservation while the pulse is inside
the grid, and that radiation leaves through the outer boundary.
"""

from pathlib import Path
from unittest.mock import patch

import numpy as np
import pytest

from sfcollapse.core import PhysicalParameters, create_radial_grid
from sfcollapse.core.constants import RESCALING_LOG_FILE
from sfcollapse.core.grid import GridParameters
from sfcollapse.equations.constraints import NewtonConvergenceWarning
from sfcollapse.solvers.evolution import EvolutionEngine


@pytest.fixture
def coarse_grid() -> GridParameters:
    """N = 201 spherical points on [0, 20]: dx = 0.1, dt = 0.05."""
    return create_radial_grid(201, r_max=20.0)


class TestEngineLifecycle:
    """Initialization, stepping and level bookkeeping."""

    def test_initialize_seeds_current_level(self, coarse_grid, weak_pulse) -> None:
        engine = EvolutionEngine(coarse_grid, weak_pulse)
        fields = engine.initialize()
        for field in fields:
            np.testing.assert_array_equal(field.current, field.previous)
            assert not np.shares_memory(field.current, field.previous)
        assert engine.step_index == 0
        assert engine.time == 0.0

    def test_step_initializes_lazily(self, coarse_grid, weak_pulse) -> None:
        engine = EvolutionEngine(coarse_grid, weak_pulse)
        engine.step()
        assert engine.fields is not None
        assert engine.step_index == 1

    def test_time_follows_phi_coefficients(self, coarse_grid, weak_pulse) -> None:
        engine = EvolutionEngine(coarse_grid, weak_pulse)
        engine.initialize()
        engine.step()
        assert engine.time == pytest.approx(0.5 * coarse_grid.dt)
        engine.step()
        engine.step()
        assert engine.time == pytest.approx(2.5 * coarse_grid.dt)

    def test_levels_rotate_after_each_step(self, coarse_grid, weak_pulse) -> None:
        engine = EvolutionEngine(coarse_grid, weak_pulse)
        fields = engine.initialize()
        written = fields.phi.next
        engine.step()
        assert fields.phi.current is written

    def test_deterministic(self, coarse_grid, weak_pulse) -> None:
        results = []
        for _ in range(2):
            engine = EvolutionEngine(coarse_grid, weak_pulse)
            engine.run(10)
            results.append(engine.fields.snapshot())
        for name, values in results[0].items():
            np.testing.assert_array_equal(values, results[1][name])


class TestSliceInvariants:
    """Properties every evolved slice must satisfy."""

    def test_vacuum_stays_flat(self, coarse_grid) -> None:
        engine = EvolutionEngine(coarse_grid, PhysicalParameters(amplitude=0.0, lapse_rescaling=False))
        engine.run(20)
        fields = engine.fields
        np.testing.assert_allclose(fields.a.current, 1.0, atol=1e-14)
        np.testing.assert_allclose(fields.alpha.current, 1.0, atol=1e-14)
        np.testing.assert_allclose(fields.phi.current, 0.0, atol=1e-14)

    def test_regularity_and_positivity(self, coarse_grid, weak_pulse) -> None:
        engine = EvolutionEngine(coarse_grid, weak_pulse)
        engine.run(20)
        fields = engine.fields
        assert fields.a.current[0] == 1.0
        assert fields.alpha.current[0] == 1.0
        assert fields.Phi.current[0] == 0.0
        assert np.all(fields.a.current >= 1.0 - 1e-14)
        assert np.all(fields.alpha.current > 0.0)

    def test_pulse_starts_moving(self, coarse_grid, weak_pulse) -> None:
        engine = EvolutionEngine(coarse_grid, weak_pulse)
        engine.run(10)
        assert np.max(np.abs(engine.fields.Pi.current)) > 1e-4

    def test_mass_conserved_while_pulse_is_inside(self, coarse_grid, weak_pulse) -> None:
        engine = EvolutionEngine(coarse_grid, weak_pulse)
        engine.initialize()
        initial_mass = engine.diagnostics()["mass"]
        summary = engine.run(40)
        assert initial_mass > 0.0
        assert summary["mass"] == pytest.approx(initial_mass, rel=5e-2)
        assert summary["mass_discrepancy"] < 5e-2 * initial_mass

    def test_phantom_field_lowers_metric(self, coarse_grid) -> None:
        params = PhysicalParameters(
            amplitude=0.01, width=1.0, center=5.0, epsilon=-1, inverted_rescaling=True
        )
        engine = EvolutionEngine(coarse_grid, params, rescale_every=5, rescaling_log=None)
        engine.run(10)
        a = engine.fields.a.current
        alpha = engine.fields.alpha.current
        assert np.all(a <= 1.0 + 1e-14)
        assert np.max(a / alpha) == pytest.approx(1.0, abs=1e-12)

    def test_sinh_grid_evolution(self, weak_pulse) -> None:
        grid = create_radial_grid(
            201, coordinate_system="sinh_spherical", sinh_width=0.3, sinh_amplitude=20.0
        )
        engine = EvolutionEngine(grid, weak_pulse)
        engine.run(20)
        for field in engine.fields:
            assert np.all(np.isfinite(field.current))
        assert engine.fields.a.current[0] == 1.0


class TestNewtonFailureRecovery:
    """A point where Newton runs out of iterations leaves later slices finite."""

    def test_huge_field_spike_keeps_metric_and_lapse_finite(self, weak_pulse) -> None:
        engine = EvolutionEngine(create_radial_grid(41, r_max=8.0), weak_pulse)
        fields = engine.initialize()
        fields.Phi.previous[10] = 1e3

        with pytest.warns(NewtonConvergenceWarning):
            for _ in range(3):
                engine.step()

        assert engine.newton_failures > 0
        for field in (fields.a, fields.alpha):
            assert np.all(np.isfinite(field.current))
            assert np.all(np.isfinite(field.previous))
        assert np.all(fields.a.current > 0.0)

    def test_exhausted_budget_tracks_converged_run(self, coarse_grid, weak_pulse) -> None:
        reference = EvolutionEngine(coarse_grid, weak_pulse)
        reference.run(5)

        engine = EvolutionEngine(coarse_grid, weak_pulse, tolerance=1e-15, max_iterations=1)
        with pytest.warns(NewtonConvergenceWarning):
            summary = engine.run(5)

        assert summary["newton_failures"] > 0
        for name in ("a", "alpha"):
            values = getattr(engine.fields, name).current
            assert np.all(np.isfinite(values))
            np.testing.assert_allclose(values, getattr(reference.fields, name).current, rtol=1e-6)


class TestRadiationLeavesTheGrid:
    """Outgoing-radiation boundary absorbs the pulse."""

    def test_pulse_leaves_through_outer_boundary(self) -> None:
        grid = create_radial_grid(101, r_max=10.0)
        params = PhysicalParameters(amplitude=0.01, width=1.0, center=5.0, lapse_rescaling=False)
        engine = EvolutionEngine(grid, params)
        engine.initialize()
        initial_peak = np.max(np.abs(engine.fields.phi.current))
        initial_mass = engine.diagnostics()["mass"]

        engine.run(360)

        assert engine.time > 17.0
        assert np.max(np.abs(engine.fields.phi.current)) < 0.2 * initial_peak
        assert abs(engine.diagnostics()["mass"]) < 0.1 * initial_mass


class TestLapseRescalingDuringEvolution:
    """Cadence of lapse normalization and its diagnostics record."""

    def test_record_lines_follow_cadence(self, coarse_grid) -> None:
        params = PhysicalParameters(amplitude=0.01, width=1.0, center=5.0, lapse_rescaling=True)
        engine = EvolutionEngine(coarse_grid, params, rescale_every=2)
        engine.run(4)
        lines = Path(RESCALING_LOG_FILE).read_text().splitlines()
        # One record for the initial data plus one every second step
        assert len(lines) == 3

    def test_rescaled_lapse_matches_inverse_metric_at_extremum(self, coarse_grid) -> None:
        params = PhysicalParameters(amplitude=0.01, width=1.0, center=5.0)
        engine = EvolutionEngine(coarse_grid, params, rescale_every=1, rescaling_log=None)
        engine.run(3)
        a = engine.fields.a.current
        alpha = engine.fields.alpha.current
        assert np.min(a / alpha) == pytest.approx(1.0, abs=1e-12)

    def test_disabled_rescaling_keeps_unit_central_lapse(self, coarse_grid, weak_pulse) -> None:
        engine = EvolutionEngine(coarse_grid, weak_pulse, rescale_every=1)
        engine.run(3)
        assert engine.rescaler is None
        assert engine.fields.alpha.current[0] == 1.0
        assert not Path(RESCALING_LOG_FILE).exists()


class TestRunSummary:
    """run() bookkeeping and periodic diagnostics."""

    def test_summary_contents(self, coarse_grid, weak_pulse) -> None:
        summary = EvolutionEngine(coarse_grid, weak_pulse).run(5)
        assert summary["steps"] == 5
        assert summary["newton_failures"] == 0
        assert summary["horizon_forming"] is False
        for key in ("time", "mass", "matter_mass", "mass_discrepancy", "max_compactness"):
            assert key in summary

    def test_periodic_mass_diagnostics(self, coarse_grid, weak_pulse) -> None:
        engine = EvolutionEngine(coarse_grid, weak_pulse, diagnostics_every=3)
        with patch("sfcollapse.solvers.evolution.physics_logger") as mock_logger:
            engine.run(9)
        assert mock_logger.log_mass_diagnostics.call_count == 3
        step, time, mass, compactness, horizon = mock_logger.log_mass_diagnostics.call_args.args
        assert step == 9
        assert horizon is False

    def test_stop_on_horizon(self, coarse_grid, weak_pulse) -> None:
        engine = EvolutionEngine(coarse_grid, weak_pulse, diagnostics_every=1, stop_on_horizon=True)
        with patch("sfcollapse.solvers.evolution.HORIZON_COMPACTNESS", 0.0):
            summary = engine.run(10)
        assert summary["steps"] == 1
        assert summary["horizon_forming"] is True
