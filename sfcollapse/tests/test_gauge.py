"""
Tests for the global lapse rescaling.
"""

from pathlib import Path

import numpy as np
import pytest

from sfcollapse.core.constants import RESCALING_LOG_FILE, ConfigurationError
from sfcollapse.equations.gauge import LapseRescaler


@pytest.fixture
def metric_and_lapse() -> tuple[np.ndarray, np.ndarray]:
    a = np.array([1.0, 1.02, 1.05, 1.03, 1.01])
    alpha = np.array([1.0, 1.04, 1.10, 1.14, 1.16])
    return a, alpha


class TestLapseRescaler:
    """kappa = extremum of a/alpha applied multiplicatively to alpha."""

    def test_standard_rescaling_uses_minimum(self, metric_and_lapse, tmp_path: Path) -> None:
        a, alpha = metric_and_lapse
        expected = np.min(a / alpha)
        original = alpha.copy()

        kappa = LapseRescaler(log_file=tmp_path / "kappa.dat").rescale(a, alpha)

        assert kappa == pytest.approx(expected)
        np.testing.assert_allclose(alpha, expected * original)
        assert np.min(a / alpha) == pytest.approx(1.0, abs=1e-14)

    def test_three_point_example(self) -> None:
        a = np.ones(3)
        alpha = np.array([1.0, 0.5, 2.0])
        kappa = LapseRescaler(log_file=None).rescale(a, alpha)
        assert kappa == 0.5
        np.testing.assert_array_equal(alpha, [0.5, 0.25, 1.0])

    def test_inverted_rescaling_uses_maximum(self, metric_and_lapse) -> None:
        a, alpha = metric_and_lapse
        alpha[0] = 0.9
        expected = np.max(a / alpha)

        kappa = LapseRescaler(epsilon=-1, inverted=True, log_file=None).rescale(a, alpha)

        assert kappa == pytest.approx(expected)
        assert np.max(a / alpha) == pytest.approx(1.0, abs=1e-14)

    def test_inverted_requires_phantom_field(self) -> None:
        with pytest.raises(ConfigurationError, match="phantom"):
            LapseRescaler(epsilon=1, inverted=True)

    def test_compute_kappa_reports_origin_ratio(self, metric_and_lapse) -> None:
        a, alpha = metric_and_lapse
        initial, kappa = LapseRescaler(log_file=None).compute_kappa(a, alpha)
        assert initial == 1.0
        assert kappa == pytest.approx(1.01 / 1.16)

    def test_record_format_and_append(self, metric_and_lapse, tmp_path: Path) -> None:
        a, alpha = metric_and_lapse
        log_file = tmp_path / "kappa.dat"
        rescaler = LapseRescaler(log_file=log_file)

        first = rescaler.rescale(a, alpha)
        second = rescaler.rescale(a, alpha)

        lines = log_file.read_text().splitlines()
        assert len(lines) == 2
        assert lines[0] == f"{1.0:.15e} {first:.15e}"
        _, final = (float(v) for v in lines[1].split())
        assert final == pytest.approx(second)
        assert second == pytest.approx(1.0)

    def test_default_record_lands_in_working_directory(self, metric_and_lapse) -> None:
        a, alpha = metric_and_lapse
        LapseRescaler().rescale(a, alpha)
        assert Path(RESCALING_LOG_FILE).exists()

    def test_disabled_record(self, metric_and_lapse, tmp_path: Path) -> None:
        a, alpha = metric_and_lapse
        LapseRescaler(log_file=None).rescale(a, alpha)
        assert list(tmp_path.iterdir()) == []
