import logging

import numpy as np
import pytest

from spectra_pipeline.spectrum.container import Spectrum


@pytest.fixture
def make_spectrum():
    def _make(waves, amps=None, spectrum_id="s"):
        if amps is None:
            amps = [0.0] * len(waves)
        return Spectrum.from_arrays(waves, amps, spectrum_id=spectrum_id)

    return _make


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    from spectra_pipeline.utils.logging_utils import reset_logging

    reset_logging()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
