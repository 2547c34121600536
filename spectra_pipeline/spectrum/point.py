#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Spectrum Points and Ordering
=============================

A ``SpectrumPoint`` is an immutable ``(wave_number, amplitude)`` value.
Both coordinates are stored with float32 precision, so a point built from
``0.1`` compares equal to any other point built from ``0.1``.

Transforms never mutate points; they derive new ones::

    >>> p = SpectrumPoint(1000.0, 0.25)
    >>> q = p.with_amplitude(0.5)

``SpectrumPointComparator`` imposes the canonical order used by every
search operation: ascending by wave number, amplitude ignored.
"""

from dataclasses import dataclass

import numpy as np


def as_float32(value: float) -> float:
    """Round a Python number to float32 precision (returned as ``float``)."""
    return float(np.float32(value))


@dataclass(frozen=True)
class SpectrumPoint:
    """
    Single sample of a spectrum.

    Parameters
    ----------
    wave_number : float
        Position on the x-axis; the ordering key.
    amplitude : float
        Measured value at ``wave_number``.
    """

    wave_number: float
    amplitude: float

    def __post_init__(self):
        object.__setattr__(self, 'wave_number', as_float32(self.wave_number))
        object.__setattr__(self, 'amplitude', as_float32(self.amplitude))

    def with_amplitude(self, amplitude: float) -> 'SpectrumPoint':
        """Return a copy carrying a new amplitude."""
        return SpectrumPoint(self.wave_number, amplitude)

    def with_wave_number(self, wave_number: float) -> 'SpectrumPoint':
        """Return a copy moved to a new wave number."""
        return SpectrumPoint(wave_number, self.amplitude)

    @classmethod
    def parse(cls, text: str) -> 'SpectrumPoint':
        """Parse ``"wave,amplitude"``; raises ``ValueError`` on bad input."""
        parts = text.split(',')
        if len(parts) != 2:
            raise ValueError(f"Failed to parse spectrum point: {text!r}")
        return cls(float(parts[0]), float(parts[1]))

    def __str__(self) -> str:
        return f"{self.wave_number},{self.amplitude}"


@dataclass(frozen=True)
class SpectrumPointComparator:
    """
    Orders points by wave number only.

    Points with equal wave numbers compare as equal regardless of their
    amplitude, which is what the ``find`` operations rely on.

    Parameters
    ----------
    ascending : bool
        If False, the order is reversed.
    """

    ascending: bool = True

    def compare_wave_numbers(self, a: float, b: float) -> int:
        if a < b:
            result = -1
        elif a > b:
            result = 1
        else:
            result = 0
        return result if self.ascending else -result

    def compare(self, a: SpectrumPoint, b: SpectrumPoint) -> int:
        return self.compare_wave_numbers(a.wave_number, b.wave_number)

    def sort_key(self, point: SpectrumPoint) -> float:
        """Key usable with ``sorted()`` that yields this comparator's order."""
        return point.wave_number if self.ascending else -point.wave_number


# Shared by all search operations; immutable, so safe across threads.
DEFAULT_COMPARATOR = SpectrumPointComparator(ascending=True)
