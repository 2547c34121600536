#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Ordered Search over Spectrum Points
====================================

Binary-search based lookups over a sequence of ``SpectrumPoint`` that is
**already sorted** by the comparator in use (ascending wave number by
default). Misses are reported through sentinels, never exceptions:

    - ``find_exact``      -> index or ``NOT_FOUND``
    - ``find_closest``    -> index, ``-1`` only for an empty sequence
    - ``find_enclosing``  -> ``(left, right)``, each ``-1`` when absent

The region helpers and sign-change counters locate their bounds with
``find_exact`` and require those wave numbers to be present.

Usage:
------
    >>> points = spectrum.sorted().to_list()
    >>> find_exact(points, 1000.0)
    42
    >>> find_enclosing(points, 1001.3)
    (42, 43)
"""

from typing import Optional, Sequence, Tuple

from spectra_pipeline.spectrum.container import Spectrum
from spectra_pipeline.spectrum.point import (
    DEFAULT_COMPARATOR,
    SpectrumPoint,
    SpectrumPointComparator,
    as_float32,
)

NOT_FOUND = -1


# =============================================================================
# BINARY SEARCH
# =============================================================================

def binary_search(
    points: Sequence[SpectrumPoint],
    wave_number: float,
    comparator: SpectrumPointComparator = DEFAULT_COMPARATOR,
) -> int:
    """
    Locate ``wave_number`` in sorted ``points``.

    Returns
    -------
    int
        The index of the match, or ``-(insertion_point) - 1`` if there is
        no point with that wave number (always negative).
    """
    wave_number = as_float32(wave_number)
    low = 0
    high = len(points) - 1

    while low <= high:
        mid = (low + high) // 2
        cmp = comparator.compare_wave_numbers(points[mid].wave_number, wave_number)
        if cmp < 0:
            low = mid + 1
        elif cmp > 0:
            high = mid - 1
        else:
            return mid

    return -(low + 1)


def find_exact(
    points: Sequence[SpectrumPoint],
    wave_number: float,
    comparator: SpectrumPointComparator = DEFAULT_COMPARATOR,
) -> int:
    """Index of the point with exactly ``wave_number``, or ``NOT_FOUND``."""
    index = binary_search(points, wave_number, comparator)
    if index < 0:
        return NOT_FOUND
    return index


def find_closest(
    points: Sequence[SpectrumPoint],
    wave_number: float,
    comparator: SpectrumPointComparator = DEFAULT_COMPARATOR,
) -> int:
    """
    Index of the point closest to ``wave_number``.

    On a miss only the window ``[ip-2, ip+2]`` around the insertion point
    ``ip`` is inspected; equal distances resolve to the lower index.
    Returns ``-1`` for an empty sequence.
    """
    if len(points) == 0:
        return -1

    index = binary_search(points, wave_number, comparator)
    if index >= 0:
        return index

    wave_number = as_float32(wave_number)
    insertion = min(-index - 1, len(points) - 1)

    result = insertion
    best = abs(wave_number - points[insertion].wave_number)
    for i in range(max(insertion - 2, 0), min(insertion + 3, len(points))):
        dist = abs(wave_number - points[i].wave_number)
        if dist < best or (dist == best and i < result):
            best = dist
            result = i

    return result


def find_enclosing(
    points: Sequence[SpectrumPoint],
    wave_number: float,
    comparator: SpectrumPointComparator = DEFAULT_COMPARATOR,
) -> Tuple[int, int]:
    """
    Indices of the points left and right of ``wave_number``.

    An exact hit is reported as the left bound. Either index is ``-1``
    when the wave number lies outside the covered range.
    """
    left, right = -1, -1

    index = find_closest(points, wave_number, comparator)
    if index > -1:
        if points[index].wave_number <= as_float32(wave_number):
            left = index
            if index < len(points) - 1:
                right = index + 1
        else:
            right = index
            if index > 0:
                left = index - 1

    return left, right


# =============================================================================
# REGIONS
# =============================================================================

def _require(points: Sequence[SpectrumPoint], wave_number: float, label: str) -> int:
    index = find_exact(points, wave_number)
    if index == NOT_FOUND:
        raise ValueError(f"{label} wave number {wave_number} not present in the data")
    return index


def get_region(
    spectrum: Spectrum,
    start: Optional[SpectrumPoint],
    end: Optional[SpectrumPoint],
) -> Spectrum:
    """
    Sub-spectrum from ``start`` to ``end`` (both inclusive).

    ``None`` bounds mean the first/last point. The spectrum must be sorted
    and both bounds must be present.
    """
    points = spectrum.to_list()
    result = spectrum.header()

    index_start = 0 if start is None else _require(points, start.wave_number, 'Start')
    index_end = len(points) - 1 if end is None else _require(points, end.wave_number, 'End')

    result.add_all(points[index_start:index_end + 1])
    return result


def get_consecutive_region(
    spectrum: Spectrum,
    last_end: Optional[SpectrumPoint],
    end: Optional[SpectrumPoint],
) -> Spectrum:
    """Like ``get_region``, but starting just after ``last_end``."""
    points = spectrum.to_list()
    result = spectrum.header()

    index_start = 0 if last_end is None else _require(points, last_end.wave_number, 'Start') + 1
    index_end = len(points) - 1 if end is None else _require(points, end.wave_number, 'End')

    result.add_all(points[index_start:index_end + 1])
    return result


# =============================================================================
# SIGN CHANGES
# =============================================================================

def _signum(value: float) -> int:
    return (value > 0) - (value < 0)


def count_sign_changes(points: Sequence[SpectrumPoint], start: float, end: float) -> int:
    """
    Number of amplitude sign changes between ``start`` and ``end``.

    Precondition: both wave numbers exist in the sorted ``points``;
    ``ValueError`` otherwise (also for an empty sequence).
    """
    start_index = _require(points, start, 'Start')
    end_index = _require(points, end, 'End')

    result = 0
    ampl = points[start_index].amplitude
    for point in points[start_index + 1:end_index + 1]:
        if _signum(point.amplitude) != _signum(ampl):
            result += 1
            ampl = point.amplitude

    return result


def count_regions(
    points: Sequence[SpectrumPoint],
    start: float,
    end: float,
    positive: bool,
) -> int:
    """
    Number of positive (``amplitude >= 0``) or negative regions between
    ``start`` and ``end``. Same precondition as ``count_sign_changes``.
    """
    start_index = _require(points, start, 'Start')
    end_index = _require(points, end, 'End')

    def _matches(ampl: float) -> bool:
        return ampl >= 0 if positive else ampl < 0

    ampl = points[start_index].amplitude
    result = 1 if _matches(ampl) else 0
    for point in points[start_index + 1:end_index + 1]:
        if _signum(point.amplitude) != _signum(ampl):
            ampl = point.amplitude
            if _matches(ampl):
                result += 1

    return result
