import logging
import math

import numpy as np
import pytest

from spectra_pipeline.filters.base import PassThrough, Transform, apply_batch
from spectra_pipeline.filters.interpolation import EquiDistance, StandardiseByInterpolation
from spectra_pipeline.filters.pls import PLS
from spectra_pipeline.filters.scatter import (
    Detrend,
    MultiplicativeScatterCorrection,
    WaveNumberRange,
)
from spectra_pipeline.filters.techniques import (
    LogTransform,
    Rebase,
    SavitzkyGolay,
    Scale,
    StandardNormalVariate,
    SubRange,
)
from spectra_pipeline.spectrum.resample import resample


# ----- base contract --------------------------------------------------------

def test_check_data_rejects_missing_or_wrong_input():
    with pytest.raises(ValueError, match="no data"):
        PassThrough().process(None)
    with pytest.raises(ValueError, match="expected a Spectrum"):
        PassThrough().process("spectrum")


def test_process_records_note_and_leaves_input(make_spectrum):
    sp = make_spectrum([1, 2, 3], [1, 2, 3])
    out = Scale(0, 1).process(sp)
    assert out.notes == ["scale"]
    assert sp.notes == []
    assert list(sp.amplitudes()) == [1, 2, 3]


def test_pass_through_returns_input(make_spectrum):
    sp = make_spectrum([1, 2], [1, 2])
    assert PassThrough().process(sp) is sp
    assert sp.notes == []


def test_get_params_and_repr():
    f = Scale(min_amplitude=-1, max_amplitude=1)
    assert f.get_params() == {"min_amplitude": -1, "max_amplitude": 1}
    assert repr(f) == "Scale(min_amplitude=-1, max_amplitude=1)"


def test_shallow_copy_shares_configuration():
    f = SavitzkyGolay(window_length=9)
    copy = f.shallow_copy()
    assert copy is not f
    assert copy.window_length == 9


def test_apply_batch_uses_process_for_plain_transforms(make_spectrum):
    spectra = [make_spectrum([1, 2], [1, 3]), make_spectrum([1, 2], [2, 6])]
    out = apply_batch(Scale(0, 1), spectra)
    assert [list(sp.amplitudes()) for sp in out] == [[0, 1], [0, 1]]


def test_transform_is_abstract():
    with pytest.raises(TypeError):
        Transform()


# ----- techniques -----------------------------------------------------------

def test_savitzky_golay_preserves_quadratic(make_spectrum):
    x = np.arange(30, dtype=float)
    sp = make_spectrum(x, 0.1 * x ** 2 + 2 * x + 1)
    out = SavitzkyGolay(window_length=7, polyorder=2).process(sp)
    np.testing.assert_array_equal(out.wave_numbers(), sp.wave_numbers())
    np.testing.assert_allclose(out.amplitudes(), sp.amplitudes(), rtol=1e-4, atol=1e-4)


def test_savitzky_golay_derivative(make_spectrum):
    x = np.arange(30, dtype=float)
    out = SavitzkyGolay(window_length=7, polyorder=2, deriv=1).process(make_spectrum(x, 3 * x))
    np.testing.assert_allclose(out.amplitudes(), 3.0, rtol=1e-4)


def test_savitzky_golay_short_spectra(make_spectrum):
    tiny = make_spectrum([1, 2, 3], [1, 5, 2])
    assert list(SavitzkyGolay().process(tiny).amplitudes()) == [1, 5, 2]

    five = make_spectrum([1, 2, 3, 4, 5], [1, 2, 3, 4, 5])
    np.testing.assert_allclose(SavitzkyGolay(window_length=11).process(five).amplitudes(), [1, 2, 3, 4, 5], atol=1e-4)


def test_scale(make_spectrum):
    out = Scale().process(make_spectrum([1, 2, 3], [1, 2, 3]))
    assert list(out.amplitudes()) == [0, 50, 100]


def test_scale_invalid_range(make_spectrum):
    with pytest.raises(ValueError, match="min amplitude > max amplitude"):
        Scale(10, 0).process(make_spectrum([1, 2], [1, 2]))


def test_scale_constant_spectrum_yields_nan(make_spectrum):
    out = Scale(0, 1).process(make_spectrum([1, 2, 3], [4, 4, 4]))
    assert np.all(np.isnan(out.amplitudes()))


def test_snv(make_spectrum, rng):
    out = StandardNormalVariate().process(make_spectrum(np.arange(50), rng.normal(5, 3, size=50)))
    assert abs(np.mean(out.amplitudes())) < 1e-5
    assert abs(np.std(out.amplitudes()) - 1) < 1e-5


def test_snv_flat_spectrum_is_only_centred(make_spectrum):
    out = StandardNormalVariate().process(make_spectrum([1, 2, 3], [4, 4, 4]))
    assert list(out.amplitudes()) == [0, 0, 0]


def test_log_transform(make_spectrum):
    sp = make_spectrum([1, 2, 3, 4], [100, 0, -1, 1000])
    np.testing.assert_allclose(LogTransform().process(sp).amplitudes(), [2, 0, 0, 3], atol=1e-6)
    np.testing.assert_allclose(
        LogTransform("e").process(sp).amplitudes(),
        [math.log(100), 0, 0, math.log(1000)], rtol=1e-6,
    )
    np.testing.assert_allclose(LogTransform(2).process(make_spectrum([1], [8])).amplitudes(), [3])


@pytest.mark.parametrize("base", ["1", "0.5", "abc", -2])
def test_log_transform_invalid_base(base):
    with pytest.raises(ValueError):
        LogTransform(base)


def test_rebase(make_spectrum):
    sp = make_spectrum([10, 11, 13], [1, 2, 3])
    assert list(Rebase(start=100).process(sp).wave_numbers()) == [100, 101, 103]

    out = Rebase(start=0, update_wave_numbers=True, wave_step=2).process(sp)
    assert list(out.wave_numbers()) == [0, 2, 4]
    assert list(out.amplitudes()) == [1, 2, 3]


def test_sub_range(make_spectrum):
    sp = make_spectrum([1, 2, 3, 4, 5], [1, 2, 3, 4, 5])
    assert list(SubRange(2, 4).process(sp).wave_numbers()) == [2, 3, 4]
    assert list(SubRange(2, 4, invert=True).process(sp).wave_numbers()) == [1, 5]
    assert list(SubRange(-1, 3).process(sp).wave_numbers()) == [1, 2, 3]
    assert list(SubRange(3, -1).process(sp).wave_numbers()) == [3, 4, 5]


# ----- interpolation --------------------------------------------------------

def test_equi_distance_delegates_to_resample(make_spectrum):
    sp = make_spectrum([0, 1, 2], [0, 10, 0])
    out = EquiDistance(num_points=5, allow_oversampling=True).process(sp)
    expected = resample(sp, num_points=5, allow_oversampling=True)
    assert out.to_list() == expected.to_list()
    assert out.notes == ["equi_distance"]


def test_standardise_by_interpolation_on_quadratic(make_spectrum):
    x = np.arange(11, dtype=float)
    sp = make_spectrum(x, x ** 2)
    out = StandardiseByInterpolation(first=0.5, last=9.5, step=1, polynomial=2).process(sp)
    grid = np.arange(0.5, 10, 1.0)
    np.testing.assert_allclose(out.wave_numbers(), grid)
    np.testing.assert_allclose(out.amplitudes(), grid ** 2, rtol=1e-4, atol=1e-4)


def test_standardise_closest_points_grow_outwards(make_spectrum):
    points = make_spectrum([0, 1, 2, 3, 4]).to_list()
    nearest = StandardiseByInterpolation.closest_points(points, 0.2, 3)
    assert [p.wave_number for p in nearest] == [0, 1, 2]
    nearest = StandardiseByInterpolation.closest_points(points, 2.4, 2)
    assert [p.wave_number for p in nearest] == [2, 3]
    assert len(StandardiseByInterpolation.closest_points(points, 2, 10)) == 5


def test_standardise_invalid_settings(make_spectrum):
    sp = make_spectrum([1, 2, 3], [1, 2, 3])
    with pytest.raises(ValueError, match="last < first"):
        StandardiseByInterpolation(first=10, last=5).process(sp)
    with pytest.raises(ValueError):
        StandardiseByInterpolation(step=0).process(sp)


# ----- scatter correction ---------------------------------------------------

@pytest.fixture
def scattered(make_spectrum):
    waves = np.arange(20, dtype=float)
    base = np.sin(np.linspace(0, 3, 20)) + 2
    return [
        make_spectrum(waves, c * base + d, spectrum_id=f"s{i}")
        for i, (c, d) in enumerate([(1.0, 0.0), (2.0, 1.0), (0.5, -1.0)])
    ]


def test_msc_maps_spectra_onto_average(scattered):
    msc = MultiplicativeScatterCorrection()
    out = msc.filter_batch(scattered)

    assert msc.is_trained()
    avg = msc.average_spectrum.amplitudes()
    for sp in out:
        np.testing.assert_allclose(sp.amplitudes(), avg, rtol=1e-4, atol=1e-4)
        assert sp.report.has_value("Intercept.all")
        assert sp.report.has_value("Slope.all")
        assert sp.notes == ["msc"]
    assert out[1].report.get_value("Slope.all") == pytest.approx(2.0 / 7 * 6, rel=1e-4)


def test_msc_untrained_process_returns_input(scattered, caplog):
    msc = MultiplicativeScatterCorrection()
    with caplog.at_level(logging.WARNING):
        out = msc.process(scattered[0])
    assert out is scattered[0]
    assert "Not trained" in caplog.text


def test_msc_training_requirements(scattered, make_spectrum):
    msc = MultiplicativeScatterCorrection()
    with pytest.raises(ValueError, match="No spectra provided"):
        msc.train([])

    msc.train(scattered)
    with pytest.raises(ValueError, match="Different number of wave numbers"):
        msc.process(make_spectrum([1, 2, 3], [1, 2, 3]))

    msc.reset_training()
    assert not msc.is_trained()


def test_msc_ranges_stored_in_report(scattered):
    msc = MultiplicativeScatterCorrection(ranges=[(0, 9), WaveNumberRange(10, None)])
    out = msc.filter_batch(scattered)
    fields = {f.name for f in out[0].report.fields()}
    assert {"Slope.[0.0;9.0]", "Intercept.[0.0;9.0]", "Slope.[10.0;+inf]"} <= fields


def test_detrend_removes_linear_trend(make_spectrum):
    waves = np.arange(10, dtype=float)
    out = Detrend().process(make_spectrum(waves, 3 * waves + 5))
    np.testing.assert_allclose(out.amplitudes(), waves, atol=1e-4)
    assert out.report.get_value("Intercept.all") == pytest.approx(5)
    assert out.report.get_value("Slope.all") == pytest.approx(3)


def test_detrend_only_touches_its_range(make_spectrum):
    waves = np.arange(10, dtype=float)
    sp = make_spectrum(waves, 3 * waves + 5)
    out = Detrend(ranges=[WaveNumberRange(0, 4)]).process(sp)
    np.testing.assert_allclose(out.amplitudes()[:5], waves[:5], atol=1e-4)
    np.testing.assert_array_equal(out.amplitudes()[5:], sp.amplitudes()[5:])
    assert out.report.has_value("Slope.[0.0;4.0]")


def test_wave_number_range():
    r = WaveNumberRange(1, 2)
    assert r.is_inside(1) and r.is_inside(2)
    assert not r.is_inside(2.5)
    assert str(WaveNumberRange()) == "all"
    assert str(WaveNumberRange(None, 5)) == "[-inf;5.0]"


# ----- PLS ------------------------------------------------------------------

@pytest.fixture
def pls_spectra(make_spectrum, rng):
    X = rng.normal(size=(12, 8))
    y = X @ rng.normal(size=8)
    spectra = []
    for i, (row, target) in enumerate(zip(X, y)):
        sp = make_spectrum(np.arange(8), row, spectrum_id=f"p{i}")
        sp.report.set_numeric_value("Reference", target)
        spectra.append(sp)
    return spectra


def test_pls_projects_batch_to_scores(pls_spectra):
    pls = PLS(num_components=3)
    out = pls.filter_batch(pls_spectra)
    assert pls.is_trained()
    assert len(out) == len(pls_spectra)
    for src, sp in zip(pls_spectra, out):
        assert sp.id == src.id
        assert list(sp.wave_numbers()) == [1, 2, 3]
        assert sp.report.get_value("Reference") == src.report.get_value("Reference")
        assert sp.notes == ["pls"]


def test_pls_single_process_is_pass_through(pls_spectra):
    pls = PLS(num_components=2)
    pls.train(pls_spectra)
    assert pls.process(pls_spectra[0]) is pls_spectra[0]


def test_pls_skips_spectra_without_reference(pls_spectra, make_spectrum, caplog):
    unlabelled = make_spectrum(np.arange(8), np.ones(8), spectrum_id="nolabel")
    pls = PLS(num_components=2)
    with caplog.at_level(logging.WARNING):
        pls.train(pls_spectra + [unlabelled])
    assert pls.is_trained()
    assert "nolabel" in caplog.text


def test_pls_requires_reference_values(make_spectrum):
    with pytest.raises(ValueError):
        PLS().train([make_spectrum([1, 2], [1, 2])])
    with pytest.raises(ValueError, match="No spectra provided"):
        PLS().train([])


@pytest.mark.parametrize("factory", [MultiplicativeScatterCorrection, lambda: PLS(num_components=2)])
def test_trainable_batch_rejects_missing_items(factory, pls_spectra):
    flt = factory()
    with pytest.raises(ValueError, match="no data provided"):
        flt.filter_batch([pls_spectra[0], None])
    with pytest.raises(ValueError, match="expected a Spectrum"):
        flt.filter_batch([pls_spectra[0], "not a spectrum"])
    assert not flt.is_trained()
