#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Composite Filter
=================

``MultiFilter`` applies an ordered list of sub-filters either

    - in **series** (default): the output of filter ``k`` feeds filter
      ``k + 1``; or
    - in **parallel-merge** mode: every sub-filter receives its own copy
      of the original input and the outputs are combined with
      ``merge()``. For overlapping wave numbers the sub-filter
      registered first wins, independent of completion order.

Parallel runs use shallow copies of the sub-filters (joblib threads when
``n_jobs != 1``), which are cleaned up after each invocation.

Usage:
------
    >>> multi = MultiFilter([SubRange(400, 999), SubRange(1000, 4000)],
    ...                     parallel_and_merge=True)
    >>> combined = multi.process(spectrum)
"""

from typing import List, Sequence

from joblib import Parallel, delayed

from spectra_pipeline.filters.base import BatchFilter, Composite, Transform, apply_batch
from spectra_pipeline.spectrum.container import Spectrum
from spectra_pipeline.spectrum.utils import merge
from spectra_pipeline.utils.logging_utils import get_logger

logger = get_logger(__name__)


class MultiFilter(Composite, BatchFilter, Transform):
    """
    Series or parallel-merge composition of filters.

    Parameters
    ----------
    filters : sequence of Transform
        Sub-filters in registration order.
    parallel_and_merge : bool
        Run all sub-filters on the original input and merge the results.
    n_jobs : int
        Worker threads for parallel-merge mode (1 = sequential,
        -1 = all cores).
    """

    name = 'multi'

    def __init__(self, filters: Sequence[Transform] = (), parallel_and_merge: bool = False, n_jobs: int = 1):
        self.filters: List[Transform] = list(filters)
        self.parallel_and_merge = parallel_and_merge
        self.n_jobs = n_jobs

    def shallow_copy(self) -> 'MultiFilter':
        # sub-filters are copied too, the originals keep their state
        return MultiFilter(
            [f.shallow_copy() for f in self.filters],
            parallel_and_merge=self.parallel_and_merge,
            n_jobs=self.n_jobs,
        )

    def _run_parallel(self, func, jobs: list) -> list:
        """Run ``func(*job)`` for all jobs, results in job order."""
        if self.n_jobs == 1 or len(jobs) < 2:
            return [func(*job) for job in jobs]
        return Parallel(n_jobs=self.n_jobs, prefer='threads')(
            delayed(func)(*job) for job in jobs
        )

    # ----- single spectrum ----------------------------------------------

    def _process(self, data: Spectrum) -> Spectrum:
        if not self.filters:
            return data.clone()

        if not self.parallel_and_merge:
            result = data
            for f in self.filters:
                result = f.process(result)
            return result

        copies = [f.shallow_copy() for f in self.filters]
        try:
            outputs = self._run_parallel(
                lambda f, sp: f.process(sp),
                [(f, data.clone()) for f in copies],
            )
        finally:
            for f in copies:
                f.clean_up()

        logger.debug("Merging %d sub-filter outputs for %s", len(outputs), data.id)
        return merge(outputs)

    # ----- batch ----------------------------------------------------------

    def filter_batch(self, spectra: Sequence[Spectrum]) -> List[Spectrum]:
        for sp in spectra:
            self.check_data(sp)

        if not self.filters:
            return [sp.clone() for sp in spectra]

        if not self.parallel_and_merge:
            result = list(spectra)
            for f in self.filters:
                result = apply_batch(f, result)
            return result

        copies = [f.shallow_copy() for f in self.filters]
        try:
            outputs = self._run_parallel(
                apply_batch,
                [(f, [sp.clone() for sp in spectra]) for f in copies],
            )
        finally:
            for f in copies:
                f.clean_up()

        sizes = {len(o) for o in outputs}
        if len(sizes) > 1:
            raise ValueError(
                f"Sub-filters returned different numbers of spectra: {[len(o) for o in outputs]}"
            )

        result = []
        for i in range(len(outputs[0])):
            merged = merge([o[i] for o in outputs])
            merged.notes.append(self.name)
            result.append(merged)
        return result

    def __len__(self) -> int:
        return len(self.filters)
