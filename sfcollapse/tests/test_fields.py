"""
Tests for three-level grid functions, the field set and the physical parameters.
"""

import dataclasses

import numpy as np
import pytest

from sfcollapse.core.constants import ConfigurationError
from sfcollapse.core.fields import (
    FieldSet,
    FieldValidationError,
    GridFunction,
    PhysicalParameters,
)


class TestGridFunction:
    """Ring of previous, current and next levels."""

    @pytest.fixture
    def marked(self) -> GridFunction:
        gf = GridFunction("phi", 4)
        gf.previous[:] = 1.0
        gf.current[:] = 2.0
        gf.next[:] = 3.0
        return gf

    def test_levels_are_distinct_buffers(self, marked: GridFunction) -> None:
        assert not np.shares_memory(marked.previous, marked.current)
        assert not np.shares_memory(marked.current, marked.next)
        assert not np.shares_memory(marked.previous, marked.next)

    def test_rotation_relabels_levels(self, marked: GridFunction) -> None:
        old_previous, old_current, old_next = marked.previous, marked.current, marked.next

        marked.rotate()

        assert marked.previous is old_current
        assert marked.current is old_next
        assert marked.next is old_previous
        np.testing.assert_array_equal(marked.previous, 2.0)
        np.testing.assert_array_equal(marked.current, 3.0)

    def test_three_rotations_are_identity(self, marked: GridFunction) -> None:
        original = marked.previous
        for _ in range(3):
            marked.rotate()
        assert marked.previous is original

    def test_seed_copies_without_aliasing(self, marked: GridFunction) -> None:
        marked.seed_current_from_previous()
        np.testing.assert_array_equal(marked.current, 1.0)
        marked.current[0] = 99.0
        assert marked.previous[0] == 1.0

    def test_set_level_checks_shape(self, marked: GridFunction) -> None:
        marked.set_level("next", np.arange(4.0))
        np.testing.assert_array_equal(marked.next, np.arange(4.0))
        with pytest.raises(FieldValidationError, match="expected shape"):
            marked.set_level("next", np.zeros(5))

    def test_unknown_level(self, marked: GridFunction) -> None:
        with pytest.raises(FieldValidationError, match="Unknown time level"):
            marked.level("future")

    def test_fill_value(self) -> None:
        gf = GridFunction("a", 3, fill=1.0)
        for name in GridFunction.LEVELS:
            np.testing.assert_array_equal(gf.level(name), 1.0)


class TestFieldSet:
    """Primary evolution fields."""

    def test_metric_and_lapse_start_flat(self) -> None:
        fields = FieldSet(5)
        np.testing.assert_array_equal(fields.a.previous, 1.0)
        np.testing.assert_array_equal(fields.alpha.next, 1.0)
        np.testing.assert_array_equal(fields.phi.current, 0.0)

    def test_rotate_moves_every_field(self) -> None:
        fields = FieldSet(5)
        for field in fields:
            field.next[:] = 7.0
        fields.rotate()
        for field in fields:
            np.testing.assert_array_equal(field.current, 7.0)

    def test_snapshot_is_a_copy(self) -> None:
        fields = FieldSet(5)
        snapshot = fields.snapshot("current")
        assert set(snapshot) == set(FieldSet.NAMES)
        snapshot["a"][0] = 3.0
        assert fields.a.current[0] == 1.0


class TestPhysicalParameters:
    """Validation of the matter model and pulse parameters."""

    def test_defaults(self) -> None:
        params = PhysicalParameters()
        assert params.initial_condition == "gaussian_shell"
        assert params.epsilon == 1
        assert not params.is_phantom

    def test_frozen(self) -> None:
        params = PhysicalParameters()
        with pytest.raises(dataclasses.FrozenInstanceError):
            params.amplitude = 1.0

    def test_inverted_rescaling_requires_phantom(self) -> None:
        with pytest.raises(ConfigurationError, match="phantom"):
            PhysicalParameters(epsilon=1, inverted_rescaling=True)

    def test_phantom_with_inverted_rescaling(self) -> None:
        params = PhysicalParameters(epsilon=-1, inverted_rescaling=True)
        assert params.is_phantom

    @pytest.mark.parametrize("epsilon", [0, 2, -2])
    def test_invalid_sign(self, epsilon: int) -> None:
        with pytest.raises(ConfigurationError, match="Sign parameter"):
            PhysicalParameters(epsilon=epsilon)

    def test_unknown_initial_condition(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown initial condition"):
            PhysicalParameters(initial_condition="lorentzian")

    def test_tanh_shell_needs_edges(self) -> None:
        with pytest.raises(ConfigurationError, match="inner_edge"):
            PhysicalParameters(initial_condition="tanh_shell")
        with pytest.raises(ConfigurationError, match="must be below"):
            PhysicalParameters(initial_condition="tanh_shell", inner_edge=6.0, outer_edge=4.0)

    def test_width_must_be_positive(self) -> None:
        with pytest.raises(ConfigurationError):
            PhysicalParameters(width=0.0)
