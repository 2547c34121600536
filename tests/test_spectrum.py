import dataclasses

import numpy as np
import pytest

from spectra_pipeline.spectrum.container import NO_ID, Spectrum
from spectra_pipeline.spectrum.point import (
    DEFAULT_COMPARATOR,
    SpectrumPoint,
    SpectrumPointComparator,
    as_float32,
)
from spectra_pipeline.spectrum.report import (
    BoolValue,
    DataType,
    Field,
    NumberValue,
    Report,
    TextValue,
    make_value,
)


# ----- points ---------------------------------------------------------------

def test_point_rounds_to_float32():
    p = SpectrumPoint(0.1, 0.2)
    assert p.wave_number == as_float32(0.1)
    assert p.amplitude == as_float32(0.2)
    assert p == SpectrumPoint(0.1, 0.2)


def test_point_is_immutable():
    p = SpectrumPoint(1.0, 2.0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        p.amplitude = 3.0
    q = p.with_amplitude(3.0)
    assert (p.amplitude, q.amplitude) == (2.0, 3.0)
    assert p.with_wave_number(5.0).wave_number == 5.0


def test_point_parse_and_str():
    p = SpectrumPoint.parse("1.5,2")
    assert (p.wave_number, p.amplitude) == (1.5, 2.0)
    assert str(p) == "1.5,2.0"
    with pytest.raises(ValueError):
        SpectrumPoint.parse("1.5")
    with pytest.raises(ValueError):
        SpectrumPoint.parse("a,b")


def test_comparator_ignores_amplitude_and_honours_direction():
    a, b = SpectrumPoint(1.0, 99.0), SpectrumPoint(2.0, -5.0)
    assert DEFAULT_COMPARATOR.compare(a, b) == -1
    assert DEFAULT_COMPARATOR.compare(a, SpectrumPoint(1.0, 0.0)) == 0
    descending = SpectrumPointComparator(ascending=False)
    assert descending.compare(a, b) == 1
    assert sorted([a, b], key=descending.sort_key) == [b, a]


# ----- reports --------------------------------------------------------------

def test_make_value_dispatches_on_data_type():
    assert make_value(DataType.NUMERIC, "1.5") == NumberValue(1.5)
    assert make_value(DataType.BOOLEAN, "yes") == BoolValue(True)
    assert make_value(DataType.STRING, 3) == TextValue("3")
    with pytest.raises(ValueError, match="Unhandled data type"):
        make_value(DataType.UNKNOWN, "x")
    with pytest.raises(ValueError):
        make_value(DataType.NUMERIC, "abc")


def test_report_set_get_and_replace():
    report = Report("r1")
    report.set_numeric_value("Protein", 12.4)
    assert report.get_value("Protein") == 12.4
    assert isinstance(report.get_field_value("Protein"), NumberValue)

    report.set_string_value("Protein", "high")
    assert report.get_value("Protein") == "high"
    assert len(report) == 1

    assert report.get_value("missing") is None
    assert report.remove_value("Protein")
    assert not report.has_value("Protein")


def test_report_merge_keeps_existing_values():
    a = Report()
    a.set_numeric_value("x", 1)
    b = Report()
    b.set_numeric_value("x", 2)
    b.set_boolean_value("flag", True)
    a.merge_with(b)
    assert a.get_value("x") == 1.0
    assert a.get_value("flag") is True


def test_report_clone_is_independent():
    a = Report("id")
    a.set_value(Field("Name", DataType.STRING), "one")
    b = a.clone()
    b.set_string_value("Name", "two")
    assert a.get_value("Name") == "one"
    assert a != b


# ----- container ------------------------------------------------------------

def test_add_replaces_point_with_same_wave_number(make_spectrum):
    sp = make_spectrum([1, 2, 3], [10, 20, 30])
    assert not sp.add(SpectrumPoint(2, 99))
    assert len(sp) == 3
    assert sp.find(2).amplitude == 99.0
    assert sp[1].amplitude == 99.0
    assert sp.add(SpectrumPoint(4, 40))
    assert 4 in sp


def test_header_keeps_metadata_without_points(make_spectrum):
    sp = make_spectrum([1, 2], [1, 2], spectrum_id="sample")
    sp.report.set_numeric_value("Protein", 3.0)
    sp.notes.append("loaded")

    head = sp.header()
    assert len(head) == 0
    assert head.id == "sample"
    assert head.report.get_value("Protein") == 3.0
    assert head.notes == ["loaded"]
    assert head.database_id == NO_ID

    head.report.set_numeric_value("Protein", 4.0)
    head.notes.append("x")
    assert sp.report.get_value("Protein") == 3.0
    assert sp.notes == ["loaded"]


def test_clone_is_independent(make_spectrum):
    sp = make_spectrum([1, 2], [1, 2])
    copy = sp.clone()
    copy.add(SpectrumPoint(3, 3))
    assert len(sp) == 2
    assert len(copy) == 3


def test_sorted_round_trip(make_spectrum, rng):
    waves = rng.permutation(np.arange(50, dtype=float))
    sp = make_spectrum(waves, rng.normal(size=50))
    assert not sp.is_sorted()

    ordered = sp.sorted()
    assert ordered.is_sorted()
    assert set(ordered.wave_numbers()) == set(sp.wave_numbers())
    assert not sp.is_sorted()


def test_id_and_format_live_in_report():
    sp = Spectrum("abc")
    assert sp.report.id == "abc"
    sp.id = "xyz"
    assert sp.report.id == "xyz"
    assert sp.format == "NIR"
    sp.format = "mir"
    assert sp.format == "MIR"


def test_statistics(make_spectrum):
    sp = make_spectrum([3, 1, 2], [5, -1, 7])
    assert sp.min_amplitude().wave_number == 1.0
    assert sp.max_amplitude().wave_number == 2.0
    assert sp.min_wave_number().amplitude == -1.0
    assert sp.max_wave_number().amplitude == 5.0
    assert Spectrum().max_amplitude() is None


def test_find_closest_on_container(make_spectrum):
    sp = make_spectrum([1, 2, 4], [0, 0, 0])
    assert sp.find_closest(3.9).wave_number == 4.0
    assert Spectrum().find_closest(1.0) is None


def test_from_arrays_length_mismatch():
    with pytest.raises(ValueError, match="differ in length"):
        Spectrum.from_arrays([1, 2], [1])


def test_dataframe_round_trip(make_spectrum):
    sp = make_spectrum([1, 2, 3], [0.5, 1.5, 2.5], spectrum_id="df")
    df = sp.to_dataframe()
    assert list(df.columns) == ["wave_number", "amplitude"]
    assert df.attrs["id"] == "df"

    back = Spectrum.from_dataframe(df)
    assert back.id == "df"
    np.testing.assert_array_equal(back.amplitudes(), sp.amplitudes())
    np.testing.assert_array_equal(back.wave_numbers(), sp.wave_numbers())
