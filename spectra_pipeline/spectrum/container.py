#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Spectrum Container
===================

A ``Spectrum`` holds:
    - an identifier (sample id)
    - a list of ``SpectrumPoint`` in insertion order
    - a ``Report`` with sample annotations
    - processing ``notes`` (names of the filters applied so far)

Point order is **not** forced to be ascending: operations that need a
sorted sequence (search, resampling) either require it or establish it
via ``sorted()``. No two points ever share a wave number; ``add()``
replaces an existing point at the same wave number in place.

Usage:
------
    >>> sp = Spectrum.from_arrays([400.0, 402.0, 404.0], [0.1, 0.3, 0.2], spectrum_id='s1')
    >>> sp.find(402.0).amplitude
    0.30000001192092896
    >>> head = sp.header()          # same id/report, no points
    >>> len(head)
    0
"""

from typing import Dict, Iterable, Iterator, List, Optional, Sequence

import numpy as np
import pandas as pd

from spectra_pipeline.spectrum.point import (
    DEFAULT_COMPARATOR,
    SpectrumPoint,
    SpectrumPointComparator,
    as_float32,
)
from spectra_pipeline.spectrum.report import Report

NO_ID = -1


class Spectrum:
    """
    Container of spectrum points plus identifying metadata.

    Parameters
    ----------
    spectrum_id : str
        Sample identifier.
    points : iterable of SpectrumPoint, optional
        Initial points, added in order.
    report : Report, optional
        Sample annotations; a fresh report is created if omitted.
    database_id : int
        Identifier assigned by an external store, ``NO_ID`` if unknown.
    """

    def __init__(
        self,
        spectrum_id: str = 'unknown',
        points: Optional[Iterable[SpectrumPoint]] = None,
        report: Optional[Report] = None,
        database_id: int = NO_ID,
    ):
        self._points: List[SpectrumPoint] = []
        self._index: Dict[float, int] = {}
        self.report = report if report is not None else Report()
        self.notes: List[str] = []
        self.database_id = database_id
        self.id = spectrum_id
        if points is not None:
            self.add_all(points)

    # ----- identity ------------------------------------------------------

    @property
    def id(self) -> str:
        return self._id

    @id.setter
    def id(self, value: str):
        self._id = value
        self.report.id = value

    @property
    def format(self) -> str:
        value = self.report.get_value(Report.FORMAT)
        return Report.DEFAULT_FORMAT if value is None else value

    @format.setter
    def format(self, value: Optional[str]):
        if value is None:
            value = Report.DEFAULT_FORMAT
        self.report.set_value(Report.FORMAT, value.upper())

    # ----- point access -------------------------------------------------

    def add(self, point: SpectrumPoint) -> bool:
        """
        Add a point.

        Returns True if the point was appended, False if it replaced an
        existing point with the same wave number.
        """
        pos = self._index.get(point.wave_number)
        if pos is not None:
            self._points[pos] = point
            return False
        self._index[point.wave_number] = len(self._points)
        self._points.append(point)
        return True

    def add_all(self, points: Iterable[SpectrumPoint]):
        for point in points:
            self.add(point)

    def replace_all(self, points: Iterable[SpectrumPoint], sort: bool = False):
        """Drop all current points and add ``points`` (optionally sorted)."""
        self.clear()
        if sort:
            points = sorted(points, key=DEFAULT_COMPARATOR.sort_key)
        self.add_all(points)

    def clear(self):
        self._points = []
        self._index = {}

    def to_list(self) -> List[SpectrumPoint]:
        """Return a copy of the point list (the points themselves are immutable)."""
        return list(self._points)

    def find(self, wave_number: float) -> Optional[SpectrumPoint]:
        """Return the point with exactly this wave number, or None."""
        pos = self._index.get(as_float32(wave_number))
        if pos is None:
            return None
        return self._points[pos]

    def find_closest(self, wave_number: float) -> Optional[SpectrumPoint]:
        """Return the point closest to ``wave_number`` (points must be sorted)."""
        from spectra_pipeline.spectrum.search import find_closest

        index = find_closest(self._points, wave_number)
        if index < 0:
            return None
        return self._points[index]

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[SpectrumPoint]:
        return iter(list(self._points))

    def __getitem__(self, index: int) -> SpectrumPoint:
        return self._points[index]

    def __contains__(self, wave_number: float) -> bool:
        return self.find(wave_number) is not None

    # ----- ordering -----------------------------------------------------

    def is_sorted(self, comparator: SpectrumPointComparator = DEFAULT_COMPARATOR) -> bool:
        return all(
            comparator.compare(a, b) < 0
            for a, b in zip(self._points, self._points[1:])
        )

    def sorted(self, comparator: SpectrumPointComparator = DEFAULT_COMPARATOR) -> 'Spectrum':
        """Return a clone with points ordered by ``comparator``."""
        result = self.header()
        result.add_all(sorted(self._points, key=comparator.sort_key))
        return result

    # ----- statistics ---------------------------------------------------

    def min_amplitude(self) -> Optional[SpectrumPoint]:
        return min(self._points, key=lambda p: p.amplitude, default=None)

    def max_amplitude(self) -> Optional[SpectrumPoint]:
        return max(self._points, key=lambda p: p.amplitude, default=None)

    def min_wave_number(self) -> Optional[SpectrumPoint]:
        return min(self._points, key=lambda p: p.wave_number, default=None)

    def max_wave_number(self) -> Optional[SpectrumPoint]:
        return max(self._points, key=lambda p: p.wave_number, default=None)

    def wave_numbers(self) -> np.ndarray:
        return np.array([p.wave_number for p in self._points], dtype=np.float64)

    def amplitudes(self) -> np.ndarray:
        return np.array([p.amplitude for p in self._points], dtype=np.float64)

    # ----- copies -------------------------------------------------------

    def header(self) -> 'Spectrum':
        """Copy of the metadata (id, report, notes, database id) without points."""
        result = Spectrum(
            spectrum_id=self.id,
            report=self.report.clone(),
            database_id=self.database_id,
        )
        result.notes = list(self.notes)
        return result

    def clone(self) -> 'Spectrum':
        result = self.header()
        result._points = list(self._points)
        result._index = dict(self._index)
        return result

    # ----- conversion ---------------------------------------------------

    @classmethod
    def from_arrays(
        cls,
        wave_numbers: Sequence[float],
        amplitudes: Sequence[float],
        spectrum_id: str = 'unknown',
    ) -> 'Spectrum':
        """Build a spectrum from parallel wave-number / amplitude arrays."""
        if len(wave_numbers) != len(amplitudes):
            raise ValueError(
                f"Wave numbers and amplitudes differ in length: "
                f"{len(wave_numbers)} != {len(amplitudes)}"
            )
        return cls(
            spectrum_id=spectrum_id,
            points=(SpectrumPoint(w, a) for w, a in zip(wave_numbers, amplitudes)),
        )

    def to_dataframe(self) -> pd.DataFrame:
        """Two-column table (``wave_number``, ``amplitude``) in point order."""
        df = pd.DataFrame({
            'wave_number': self.wave_numbers(),
            'amplitude': self.amplitudes(),
        })
        df.attrs['id'] = self.id
        df.attrs['report'] = self.report.to_dict()
        return df

    @classmethod
    def from_dataframe(
        cls,
        df: pd.DataFrame,
        spectrum_id: Optional[str] = None,
        wave_col: str = 'wave_number',
        amplitude_col: str = 'amplitude',
    ) -> 'Spectrum':
        if spectrum_id is None:
            spectrum_id = df.attrs.get('id', 'unknown')
        return cls.from_arrays(
            df[wave_col].to_numpy(dtype=np.float64),
            df[amplitude_col].to_numpy(dtype=np.float64),
            spectrum_id=spectrum_id,
        )

    def __repr__(self) -> str:
        return (
            f"Spectrum(id={self.id!r}, format={self.format!r}, "
            f"database_id={self.database_id}, points={len(self)})"
        )
