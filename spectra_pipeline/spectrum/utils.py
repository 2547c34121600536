#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Spectrum Set Algebra and Helpers
=================================

Operations that combine spectra keyed by wave number. All of them build
their result from the header of the first argument, so the sample
metadata survives, and none of them modifies its inputs.

Operations:
    1. Set algebra   — union, minus, intersect, missing_regions, merge
    2. Gap filling   — fill_gaps with NOTHING / ZERO / ORIGINAL / CONNECT
    3. Comparison    — diff
    4. Misc          — pad, average, to_array

Usage:
------
    >>> from spectra_pipeline.spectrum import utils as su
    >>> combined = su.union(a, b)
    >>> closed = su.fill_gaps(a, reference, su.GapFilling.ZERO)
    >>> error, delta = su.diff(a, b, absolute=True)
"""

from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from spectra_pipeline.spectrum.container import Spectrum
from spectra_pipeline.spectrum.point import SpectrumPoint


# =============================================================================
# SET ALGEBRA
# =============================================================================

def union(a: Spectrum, b: Spectrum) -> Spectrum:
    """Clone of ``a`` plus the points of ``b`` whose wave number ``a`` lacks."""
    result = a.clone()
    for point in b:
        if a.find(point.wave_number) is None:
            result.add(point)
    return result


def minus(a: Spectrum, b: Spectrum) -> Spectrum:
    """Points of ``a`` whose wave number is absent from ``b``."""
    result = a.header()
    for point in a:
        if b.find(point.wave_number) is None:
            result.add(point)
    return result


def intersect(a: Spectrum, b: Spectrum) -> Spectrum:
    """Points of ``a`` whose wave number is present in ``b``."""
    result = a.header()
    for point in a:
        if b.find(point.wave_number) is not None:
            result.add(point)
    return result


def missing_regions(a: Spectrum, b: Spectrum) -> List[Spectrum]:
    """
    Maximal runs of consecutive points of ``a`` (in ``a``'s order) that
    are missing from ``b``; each run is returned as its own spectrum.
    """
    result: List[Spectrum] = []
    region: Optional[Spectrum] = None

    for point in a:
        if b.find(point.wave_number) is None:
            if region is None:
                region = a.header()
                result.append(region)
            region.add(point)
        else:
            region = None

    return result


def merge(spectra: Sequence[Spectrum]) -> Optional[Spectrum]:
    """
    Pool the points of all spectra by wave number.

    The first spectrum that contributes a wave number wins; later ones do
    not overwrite it. The output follows pool insertion order and is not
    re-sorted.

    Returns
    -------
    Spectrum or None
        None for an empty list, the (uncopied) spectrum itself for a
        single-element list, otherwise a new spectrum based on the header
        of the first one.
    """
    if len(spectra) == 0:
        return None
    if len(spectra) == 1:
        return spectra[0]

    pool: Dict[float, SpectrumPoint] = {}
    for spectrum in spectra:
        for point in spectrum:
            if point.wave_number not in pool:
                pool[point.wave_number] = point

    result = spectra[0].header()
    result.add_all(pool.values())
    return result


# =============================================================================
# GAP FILLING
# =============================================================================

class GapFilling(Enum):
    """How ``fill_gaps`` populates wave numbers missing from the target."""
    NOTHING = 'nothing'
    ZERO = 'zero'
    ORIGINAL = 'original'
    CONNECT = 'connect'


def fill_gaps(gaps: Spectrum, reference: Spectrum, strategy: GapFilling) -> Spectrum:
    """
    Add the wave numbers of ``reference`` that ``gaps`` lacks.

    Parameters
    ----------
    gaps : Spectrum
        Spectrum with missing wave numbers (left unchanged).
    reference : Spectrum
        Spectrum providing the complete set of wave numbers.
    strategy : GapFilling
        NOTHING adds nothing, ZERO adds zero amplitudes, ORIGINAL copies
        the reference amplitudes and CONNECT ramps linearly between the
        amplitudes bordering each run of missing wave numbers (0 where a
        run touches either end of the reference). Ramp offsets are
        truncated toward zero.

    Raises
    ------
    ValueError
        For an unhandled strategy.
    """
    result = gaps.clone()

    if strategy is GapFilling.NOTHING:
        pass

    elif strategy is GapFilling.ZERO:
        for point in minus(reference, gaps):
            result.add(point.with_amplitude(0.0))

    elif strategy is GapFilling.ORIGINAL:
        for point in minus(reference, gaps):
            result.add(point)

    elif strategy is GapFilling.CONNECT:
        points = reference.to_list()
        n = len(points)
        i = 0
        while i < n:
            if gaps.find(points[i].wave_number) is None:
                first = i - 1

                # skip to the end of the run
                while i < n and gaps.find(points[i].wave_number) is None:
                    i += 1

                if i < n:
                    second = i
                    delta = float(points[second].amplitude)
                else:
                    second = n
                    delta = 0.0

                base = 0.0
                if first > -1:
                    delta -= points[first].amplitude
                    base = points[first].amplitude
                delta /= (second - first)

                for j in range(first + 1, second):
                    result.add(points[j].with_amplitude(base + int((j - first) * delta)))

            i += 1

    else:
        raise ValueError(f"Unhandled gap-filling type: {strategy}")

    return result


# =============================================================================
# COMPARISON
# =============================================================================

def diff(s1: Spectrum, s2: Spectrum, absolute: bool = False) -> Tuple[Optional[str], Spectrum]:
    """
    Point-wise amplitude difference ``s1 - s2``.

    Returns
    -------
    (error, result)
        ``error`` is None on success, otherwise a message describing the
        size or wave-number mismatch; in that case ``result`` holds no
        points. The result id is ``"<s1.id> - <s2.id>"``.
    """
    result = s1.header()
    result.id = f"{s1.id} - {s2.id}"

    if len(s1) != len(s2):
        return f"Spectra differ in size: {len(s1)} != {len(s2)}", result

    points = []
    for i, (p0, p1) in enumerate(zip(s1, s2)):
        if p0.wave_number != p1.wave_number:
            result.clear()
            return (
                f"Wave numbers differ at #{i + 1}: {p0.wave_number} != {p1.wave_number}",
                result,
            )
        ampl = p0.amplitude - p1.amplitude
        if absolute:
            ampl = abs(ampl)
        points.append(SpectrumPoint(p0.wave_number, ampl))

    result.add_all(points)
    return None, result


# =============================================================================
# MISC
# =============================================================================

def pad(
    data: Spectrum,
    num_points: int,
    pad_left: bool = False,
    wave_step: float = 1.0,
    amplitude: float = 0.0,
) -> Spectrum:
    """
    Extend ``data`` to ``num_points`` by adding points before the first
    (``pad_left``) or after the last point, ``wave_step`` apart.
    """
    result = data.clone()
    if len(result) == 0:
        first = last = 0.0
    else:
        first = result[0].wave_number
        last = result[len(result) - 1].wave_number

    while len(result) < num_points:
        if pad_left:
            first -= wave_step
            point = SpectrumPoint(first, amplitude)
        else:
            last += wave_step
            point = SpectrumPoint(last, amplitude)
        if not result.add(point):
            raise ValueError(f"Padding step {wave_step} does not produce new wave numbers")

    if pad_left:
        result.replace_all(result.to_list(), sort=True)

    return result


def to_array(spectrum: Spectrum) -> np.ndarray:
    """Amplitudes of ``spectrum`` as a float64 vector."""
    return spectrum.amplitudes()


def average(spectra: Sequence[Spectrum], new_id: Optional[str] = None) -> Optional[Spectrum]:
    """
    Mean amplitude per position over equally sized spectra.

    Wave numbers are taken from the first spectrum. Returns None for an
    empty list and the spectrum itself for a single one.
    """
    if len(spectra) == 0:
        return None
    if len(spectra) == 1:
        return spectra[0]

    size = len(spectra[0])
    for sp in spectra[1:]:
        if len(sp) != size:
            raise ValueError(
                f"Cannot average spectra of different size: {size} != {len(sp)} ({sp.id})"
            )

    matrix = np.vstack([sp.amplitudes() for sp in spectra])
    means = matrix.mean(axis=0)

    result = spectra[0].header()
    result.id = new_id if new_id is not None else f"avg({len(spectra)} spectra)"
    result.add_all(
        SpectrumPoint(p.wave_number, m) for p, m in zip(spectra[0], means)
    )
    return result
