#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
PLS Projection
===============

Partial Least Squares as a batch filter: fitted on the amplitude vectors
of a population against a numeric reference value stored in each
spectrum's report, it replaces every spectrum by its PLS scores. The
output spectra keep id and report; their points are ``(k + 1, score_k)``.

Single spectra passed to ``process`` are returned unchanged; the
projection only happens in ``filter_batch``.

Usage:
------
    >>> pls = PLS(reference_field='Protein', num_components=5)
    >>> scores = pls.filter_batch(spectra)
    >>> len(scores[0])
    5
"""

from typing import List, Sequence

import numpy as np
from sklearn.cross_decomposition import PLSRegression

from spectra_pipeline.filters.base import Trainable, Transform
from spectra_pipeline.spectrum.container import Spectrum
from spectra_pipeline.spectrum.point import SpectrumPoint
from spectra_pipeline.spectrum.utils import to_array
from spectra_pipeline.utils.logging_utils import get_logger

logger = get_logger(__name__)


class PLS(Trainable, Transform):
    """
    PLS score projection.

    Parameters
    ----------
    reference_field : str
        Name of the numeric report field used as regression target.
    num_components : int
        Number of PLS components (capped at what the training data
        supports).
    """

    name = 'pls'

    def __init__(self, reference_field: str = 'Reference', num_components: int = 5):
        self.reference_field = reference_field
        self.num_components = num_components
        self.model = None

    def _reference_value(self, data: Spectrum):
        value = data.report.get_value(self.reference_field)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return float(value)

    # ----- training -------------------------------------------------------

    def _train(self, spectra: List[Spectrum]):
        rows, targets = [], []
        for sp in spectra:
            value = self._reference_value(sp)
            if value is None:
                logger.warning(
                    "Skipping %s: no numeric value for '%s'", sp.id, self.reference_field,
                )
                continue
            rows.append(to_array(sp))
            targets.append(value)

        if not rows:
            raise ValueError(
                f"No spectra with a numeric '{self.reference_field}' value to train on!"
            )

        X = np.vstack(rows)
        y = np.array(targets, dtype=np.float64)

        n_components = min(self.num_components, X.shape[0], X.shape[1])
        if n_components < self.num_components:
            logger.warning(
                "Reducing PLS components from %d to %d (training data is %dx%d)",
                self.num_components, n_components, X.shape[0], X.shape[1],
            )

        self.model = PLSRegression(n_components=n_components, scale=False)
        self.model.fit(X, y)
        logger.info("Trained PLS with %d components on %d spectra", n_components, X.shape[0])

    def is_trained(self) -> bool:
        return self.model is not None

    def reset_training(self):
        self.model = None

    # ----- filtering ------------------------------------------------------

    def _process(self, data: Spectrum) -> Spectrum:
        return data

    def filter_batch(self, spectra: Sequence[Spectrum]) -> List[Spectrum]:
        if not self.is_trained():
            self.train(spectra)

        for sp in spectra:
            self.check_data(sp)

        scores = self.model.transform(np.vstack([to_array(sp) for sp in spectra]))

        result = []
        for sp, row in zip(spectra, scores):
            out = sp.header()
            out.add_all(SpectrumPoint(k + 1, s) for k, s in enumerate(row))
            out.notes.append(self.name)
            result.append(out)
        return result
