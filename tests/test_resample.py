import numpy as np
import pytest

from spectra_pipeline.spectrum.container import Spectrum
from spectra_pipeline.spectrum.point import SpectrumPoint
from spectra_pipeline.spectrum.resample import interpolate, resample


def test_interpolate():
    p = interpolate(1.5, SpectrumPoint(1, 10), SpectrumPoint(2, 20))
    assert (p.wave_number, p.amplitude) == (1.5, 15.0)
    assert interpolate(1, SpectrumPoint(1, 10), SpectrumPoint(1, 20)).amplitude == 10


def test_oversampling_smooths_exact_hits(make_spectrum):
    sp = make_spectrum([0, 1, 2], [0, 10, 0], spectrum_id="tri")
    out = resample(sp, num_points=5, allow_oversampling=True)
    assert out.id == "tri"
    assert list(out.wave_numbers()) == [0, 0.5, 1, 1.5, 2]
    assert list(out.amplitudes()) == [0, 5, 7.5, 5, 0]


def test_target_is_capped_without_oversampling(make_spectrum):
    sp = make_spectrum([0, 1, 2], [0, 10, 0])
    out = resample(sp, num_points=5)
    assert list(out.wave_numbers()) == [0, 1, 2]
    assert list(out.amplitudes()) == [0, 5, 0]


def test_endpoints_and_spacing(make_spectrum, rng):
    waves = np.sort(rng.choice(np.arange(400, 1000), size=40, replace=False)).astype(float)
    sp = make_spectrum(waves, rng.normal(size=40))

    out = resample(sp, num_points=25)
    assert len(out) == 25
    assert out[0] == sp[0]
    assert out[len(out) - 1] == sp[len(sp) - 1]
    np.testing.assert_allclose(np.diff(out.wave_numbers()), (waves[-1] - waves[0]) / 24, rtol=1e-4)


def test_default_keeps_size(make_spectrum):
    sp = make_spectrum([0, 1, 3, 4], [0, 1, 3, 4])
    assert len(resample(sp)) == 4


def test_interpolated_values_on_linear_data(make_spectrum):
    sp = make_spectrum([0, 3, 10], [0, 6, 20])
    out = resample(sp, num_points=6, allow_oversampling=True)
    np.testing.assert_allclose(out.amplitudes(), 2 * out.wave_numbers(), rtol=1e-5)


def test_offset_reindexes_wave_numbers(make_spectrum):
    sp = make_spectrum([0, 1, 2], [0, 10, 0])
    out = resample(sp, num_points=5, allow_oversampling=True, offset=10)
    assert list(out.wave_numbers()) == [11, 12, 13, 14, 15]
    assert list(out.amplitudes()) == [0, 5, 7.5, 5, 0]


def test_input_left_untouched(make_spectrum):
    sp = make_spectrum([0, 1, 2], [0, 10, 0])
    resample(sp, num_points=5, allow_oversampling=True)
    assert list(sp.amplitudes()) == [0, 10, 0]


def test_invalid_input(make_spectrum):
    with pytest.raises(ValueError):
        resample(Spectrum())
    with pytest.raises(ValueError, match="sorted"):
        resample(make_spectrum([2, 1, 3]))
    with pytest.raises(ValueError):
        resample(make_spectrum([1, 2, 3]), num_points=1)
