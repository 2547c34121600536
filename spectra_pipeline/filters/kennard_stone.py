#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Kennard-Stone Subset Selection
===============================

Greedy max-min selection of a representative subset of spectra:

    1. pre-filter every spectrum (and optionally run a batch filter)
    2. Euclidean distances between all amplitude vectors
    3. seed with the two spectra furthest apart
    4. repeatedly add the candidate whose nearest chosen spectrum is
       furthest away, until ``subset_size`` spectra are chosen

The returned spectra are the *original* (unfiltered) ones, in their
original order; ``invert`` returns the complement instead. A
``subset_size`` of ``-1`` returns all spectra unchanged.

Usage:
------
    >>> from spectra_pipeline.filters.kennard_stone import select
    >>> train = select(spectra, subset_size=50)
    >>> test = select(spectra, subset_size=50, invert=True)
"""

import logging
from typing import List, Optional, Sequence

import numpy as np
from scipy.spatial.distance import pdist, squareform

from spectra_pipeline.filters.base import BatchFilter, Transform, apply_batch
from spectra_pipeline.filters.techniques import SavitzkyGolay
from spectra_pipeline.spectrum.container import Spectrum
from spectra_pipeline.spectrum.utils import to_array
from spectra_pipeline.utils.logging_utils import LogTimer, get_logger

logger = get_logger(__name__)


# =============================================================================
# DISTANCES
# =============================================================================

def distance_matrix(spectra: Sequence[Spectrum]) -> np.ndarray:
    """
    Pairwise Euclidean distances of the amplitude vectors.

    Raises
    ------
    ValueError
        If the spectra differ in length.
    """
    vectors = [to_array(sp) for sp in spectra]
    lengths = {len(v) for v in vectors}
    if len(lengths) > 1:
        raise ValueError(
            f"Spectra must have equal length for distance calculation, got lengths {sorted(lengths)}"
        )
    if len(vectors) < 2:
        return np.zeros((len(vectors), len(vectors)))
    return squareform(pdist(np.vstack(vectors), metric='euclidean'))


def _dist(distances: np.ndarray, i: int, j: int) -> float:
    return distances[min(i, j), max(i, j)]


def select_indices(distances: np.ndarray, subset_size: int) -> List[int]:
    """
    Indices chosen by the max-min strategy, in order of selection.

    Ties go to the pair/candidate encountered first in index order.
    """
    n = distances.shape[0]
    if subset_size <= 0 or n == 0:
        return []
    if n == 1:
        return [0]

    best = -1.0
    seed = (0, 1)
    for i in range(n - 1):
        for j in range(i + 1, n):
            if distances[i, j] > best:
                best = distances[i, j]
                seed = (i, j)

    chosen = [seed[0], seed[1]][:subset_size]
    remaining = [i for i in range(n) if i not in seed]

    while len(chosen) < subset_size and remaining:
        best = -1.0
        best_index = remaining[0]
        for candidate in remaining:
            nearest = min(_dist(distances, candidate, c) for c in chosen)
            if nearest > best:
                best = nearest
                best_index = candidate
        chosen.append(best_index)
        remaining.remove(best_index)

    return chosen


def select(
    spectra: Sequence[Spectrum],
    pre_filter: Optional[Transform] = None,
    subset_size: int = -1,
    invert: bool = False,
    batch_filter: Optional[Transform] = None,
) -> List[Spectrum]:
    """
    Kennard-Stone selection.

    Parameters
    ----------
    spectra : sequence of Spectrum
        Candidates (not modified).
    pre_filter : Transform, optional
        Applied to every spectrum before computing distances; defaults
        to ``SavitzkyGolay()``.
    subset_size : int
        Number of spectra to select, ``-1`` for all (no selection).
    invert : bool
        Return the spectra that were *not* selected.
    batch_filter : Transform, optional
        Applied to the pre-filtered population as a whole.

    Returns
    -------
    list of Spectrum
        Selected (or rejected) original spectra, in input order.

    Raises
    ------
    ValueError
        For ``subset_size < -1`` or pre-filtered spectra of unequal length.
    """
    if subset_size == -1:
        return list(spectra)
    if subset_size < -1:
        raise ValueError(f"Subset size must be -1 or non-negative: {subset_size}")

    if pre_filter is None:
        pre_filter = SavitzkyGolay()

    with LogTimer(logger, f"Kennard-Stone selection of {subset_size} from {len(spectra)}", level=logging.DEBUG):
        filtered = [pre_filter.process(sp) for sp in spectra]
        if batch_filter is not None:
            filtered = apply_batch(batch_filter, filtered)
        chosen = set(select_indices(distance_matrix(filtered), subset_size))

    return [sp for i, sp in enumerate(spectra) if (i in chosen) != invert]


# =============================================================================
# FILTER
# =============================================================================

class KennardStone(BatchFilter, Transform):
    """
    Batch filter wrapper around ``select``.

    ``process`` on a single spectrum only applies the pre-filter. The
    distance matrix of the last batch is kept in ``distances`` until
    ``clean_up()``.
    """

    name = 'kennard_stone'

    def __init__(
        self,
        subset_size: int = -1,
        pre_filter: Optional[Transform] = None,
        batch_filter: Optional[Transform] = None,
        invert: bool = False,
    ):
        self.subset_size = subset_size
        self.pre_filter = pre_filter if pre_filter is not None else SavitzkyGolay()
        self.batch_filter = batch_filter
        self.invert = invert
        self.distances: Optional[np.ndarray] = None

    def _process(self, data: Spectrum) -> Spectrum:
        return self.pre_filter.process(data)

    def filter_batch(self, spectra: Sequence[Spectrum]) -> List[Spectrum]:
        if self.subset_size == -1:
            return list(spectra)
        if self.subset_size < -1:
            raise ValueError(f"Subset size must be -1 or non-negative: {self.subset_size}")

        filtered = [self.process(sp) for sp in spectra]
        if self.batch_filter is not None:
            filtered = apply_batch(self.batch_filter, filtered)
        self.distances = distance_matrix(filtered)

        chosen = set(select_indices(self.distances, self.subset_size))
        logger.info(
            "Kennard-Stone chose %d of %d spectra%s",
            len(chosen), len(spectra), ' (inverted)' if self.invert else '',
        )
        return [sp for i, sp in enumerate(spectra) if (i in chosen) != self.invert]

    def clean_up(self):
        self.distances = None
