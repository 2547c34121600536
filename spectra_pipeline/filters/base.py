#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Filter Abstractions
====================

Every filter maps spectra to new spectra and never modifies its input.
Three capabilities are combined by the concrete filters:

    - ``Transform``   — ``process(spectrum) -> spectrum``
    - ``BatchFilter`` — ``filter_batch(spectra) -> spectra``
    - ``Trainable``   — a batch filter that fits on a population first
                        (``train`` / ``is_trained`` / ``reset_training``)

``Composite`` filters own an ordered list of sub-filters and cascade
``clean_up()`` to them.

Usage:
------
    >>> class Negate(Transform):
    ...     name = 'negate'
    ...     def _process(self, data):
    ...         result = data.header()
    ...         result.add_all(p.with_amplitude(-p.amplitude) for p in data)
    ...         return result
    >>> out = Negate().process(spectrum)
    >>> out.notes[-1]
    'negate'
"""

import copy
import inspect
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence

from spectra_pipeline.spectrum.container import Spectrum
from spectra_pipeline.utils.logging_utils import get_logger

logger = get_logger(__name__)


# =============================================================================
# SINGLE-ITEM TRANSFORM
# =============================================================================

class Transform(ABC):
    """Base class of all filters: one spectrum in, one spectrum out."""

    name = 'transform'

    def check_data(self, data: Any):
        """
        Validate the input before processing.

        Raises
        ------
        ValueError
            If ``data`` is None or not a ``Spectrum``.
        """
        if data is None:
            raise ValueError(f"{type(self).__name__}: no data provided")
        if not isinstance(data, Spectrum):
            raise ValueError(
                f"{type(self).__name__}: expected a Spectrum, got {type(data).__name__}"
            )

    def process(self, data: Spectrum) -> Spectrum:
        """Validate ``data`` and return the filtered spectrum."""
        self.check_data(data)
        result = self._process(data)
        if result is not data:
            result.notes.append(self.name)
        return result

    @abstractmethod
    def _process(self, data: Spectrum) -> Spectrum:
        ...

    def shallow_copy(self) -> 'Transform':
        """Copy sharing configuration but none of the per-run state."""
        result = copy.copy(self)
        result.clean_up()
        return result

    def clean_up(self):
        """Release transient per-run state (nothing by default)."""

    def get_params(self) -> Dict[str, Any]:
        """Constructor parameters of this filter, read back from attributes."""
        params = {}
        for param in inspect.signature(type(self).__init__).parameters.values():
            if param.name == 'self' or param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue
            if hasattr(self, param.name):
                params[param.name] = getattr(self, param.name)
        return params

    def __repr__(self) -> str:
        args = ', '.join(f"{k}={v!r}" for k, v in self.get_params().items())
        return f"{type(self).__name__}({args})"


# =============================================================================
# BATCH AND TRAINABLE
# =============================================================================

class BatchFilter(ABC):
    """Capability of filtering a whole population at once."""

    @abstractmethod
    def filter_batch(self, spectra: Sequence[Spectrum]) -> List[Spectrum]:
        ...


class Trainable(BatchFilter):
    """
    Batch filter that must be fitted on a population before use.

    The default ``filter_batch`` trains on the batch if necessary and
    then applies ``process`` to every item.
    """

    @abstractmethod
    def is_trained(self) -> bool:
        ...

    def train(self, spectra: Sequence[Spectrum]):
        """
        Fit the filter on ``spectra``.

        Raises
        ------
        ValueError
            If no spectra are provided or one of them is not a ``Spectrum``.
        """
        if spectra is None or len(spectra) == 0:
            raise ValueError("No spectra provided for training!")
        for i, sp in enumerate(spectra):
            if sp is None:
                raise ValueError(f"{type(self).__name__}: no data provided (item #{i})")
            if not isinstance(sp, Spectrum):
                raise ValueError(
                    f"{type(self).__name__}: expected a Spectrum, got {type(sp).__name__} (item #{i})"
                )
        self._train(list(spectra))

    @abstractmethod
    def _train(self, spectra: List[Spectrum]):
        ...

    @abstractmethod
    def reset_training(self):
        ...

    def filter_batch(self, spectra: Sequence[Spectrum]) -> List[Spectrum]:
        if not self.is_trained():
            self.train(spectra)
        return [self.process(sp) for sp in spectra]


# =============================================================================
# COMPOSITE
# =============================================================================

class Composite(ABC):
    """Owner of an ordered list of sub-filters."""

    filters: List[Transform]

    def clean_up(self):
        for f in self.filters:
            f.clean_up()


class PassThrough(Transform):
    """Returns its input unchanged."""

    name = 'pass_through'

    def _process(self, data: Spectrum) -> Spectrum:
        return data


def apply_batch(flt: Transform, spectra: Sequence[Spectrum]) -> List[Spectrum]:
    """Run ``spectra`` through ``flt``, in batch mode if it supports one."""
    if isinstance(flt, BatchFilter):
        return flt.filter_batch(spectra)
    return [flt.process(sp) for sp in spectra]
