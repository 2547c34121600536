#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Equi-Distance Resampling
=========================

Re-samples a sorted spectrum onto evenly spaced wave numbers using
linear interpolation between the bracketing input points.

Target wave numbers that coincide exactly with an input point would
otherwise keep the raw amplitude and stick out of the interpolated
curve; they are smoothed in a second pass by averaging the raw value
with the interpolation of their output neighbours.

Usage:
------
    >>> sp = Spectrum.from_arrays([0, 1, 2], [0, 10, 0])
    >>> out = resample(sp, num_points=5, allow_oversampling=True)
    >>> [p.amplitude for p in out]
    [0.0, 5.0, 7.5, 5.0, 0.0]
"""

from typing import List

from spectra_pipeline.spectrum.container import Spectrum
from spectra_pipeline.spectrum.point import SpectrumPoint
from spectra_pipeline.spectrum.search import binary_search
from spectra_pipeline.utils.logging_utils import get_logger

logger = get_logger(__name__)


def interpolate(wave_number: float, left: SpectrumPoint, right: SpectrumPoint) -> SpectrumPoint:
    """
    Linear interpolation of the amplitude at ``wave_number`` between
    ``left`` and ``right``.
    """
    if left.wave_number == right.wave_number:
        return SpectrumPoint(wave_number, left.amplitude)

    perc_left = 1.0 - (wave_number - left.wave_number) / (right.wave_number - left.wave_number)
    perc_right = 1.0 - perc_left
    return SpectrumPoint(
        wave_number,
        left.amplitude * perc_left + right.amplitude * perc_right,
    )


def resample(
    data: Spectrum,
    num_points: int = -1,
    allow_oversampling: bool = False,
    offset: int = -1,
) -> Spectrum:
    """
    Resample ``data`` onto equidistant wave numbers.

    Parameters
    ----------
    data : Spectrum
        Non-empty spectrum sorted by ascending wave number.
    num_points : int
        Number of output points; ``-1`` keeps the input size.
    allow_oversampling : bool
        Whether ``num_points`` may exceed the input size (otherwise it is
        capped at the input size).
    offset : int
        If ``>= 0``, output wave numbers are re-indexed to
        ``offset + 1, offset + 2, ...`` instead of the computed spacing.

    Returns
    -------
    Spectrum
        New spectrum built from the header of ``data``. The first and last
        points are copies of the input's first and last points.

    Raises
    ------
    ValueError
        For an empty or unsorted input and for fewer than two output points.
    """
    points = data.to_list()
    if len(points) == 0:
        raise ValueError(f"Cannot resample empty spectrum: {data.id}")
    if not data.is_sorted():
        raise ValueError(f"Spectrum must be sorted by wave number for resampling: {data.id}")

    if num_points != -1 and (allow_oversampling or num_points <= len(points)):
        count = num_points
    else:
        count = len(points)
    if count < 2:
        raise ValueError(f"At least 2 points required for resampling, got {count}")

    first = points[0]
    last = points[-1]
    spacing = (last.wave_number - first.wave_number) / (count - 1)

    output: List[SpectrumPoint] = [first]
    exact: List[int] = []

    for i in range(1, count - 1):
        wave = first.wave_number + i * spacing
        index = binary_search(points, wave)
        if index >= 0:
            exact.append(len(output))
            output.append(points[index])
        else:
            insertion = min(max(-index - 1, 1), len(points) - 1)
            output.append(interpolate(wave, points[insertion - 1], points[insertion]))

    output.append(last)

    # smooth exact hits against their output neighbours
    for pos in exact:
        if pos == len(output) - 1:
            left, right = output[pos - 1], output[pos]
        else:
            left, right = output[pos - 1], output[pos + 1]
        neighbour = interpolate(output[pos].wave_number, left, right)
        output[pos] = output[pos].with_amplitude(
            (neighbour.amplitude + output[pos].amplitude) / 2.0
        )

    if offset >= 0:
        output = [p.with_wave_number(offset + i + 1) for i, p in enumerate(output)]

    logger.debug(
        "Resampled %s: %d -> %d points (%d exact hits)",
        data.id, len(points), len(output), len(exact),
    )

    result = data.header()
    result.add_all(output)
    return result
