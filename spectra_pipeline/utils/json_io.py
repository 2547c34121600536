#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
JSON Files for Configs and Filter Specifications
=================================================

``Config.save`` / ``Config.from_json`` and the ``save_filter`` /
``load_filter`` pair of ``spectra_pipeline.filters.pipeline`` go through
these functions. Filter parameters may hold numpy scalars (e.g. a range
bound taken from ``Spectrum.wave_numbers()``), so encoding falls back to
``_to_builtin``.

Spectra are never written here; storing them belongs to the caller.

Usage:
------
    >>> from spectra_pipeline.utils.json_io import save_json, load_json
    >>>
    >>> path = save_json(filter_to_dict(pipe), 'specs/pipeline.json')
    >>> spec = load_json(path)
"""

import json
from pathlib import Path
from typing import Any, Union

import numpy as np

PathLike = Union[str, Path]


def ensure_dir(path: PathLike, parents: bool = True) -> Path:
    """
    Create ``path`` as a directory, or its parent when ``path`` has a
    file suffix, and return the directory.
    """
    path = Path(path)
    directory = path.parent if path.suffix else path
    directory.mkdir(parents=parents, exist_ok=True)
    return directory


# =============================================================================
# ENCODING
# =============================================================================

def _to_builtin(obj: Any) -> Any:
    """``default=`` hook of ``json.dump``: numpy values, paths and sets."""
    if isinstance(obj, np.generic):
        return obj.item()
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, Path):
        return obj.as_posix()
    if isinstance(obj, (set, frozenset)):
        return sorted(obj)
    raise TypeError(f"Cannot encode {type(obj).__name__} as JSON")


def to_json_string(data: Any) -> str:
    """Single-line JSON text of ``data``."""
    return json.dumps(data, default=_to_builtin)


# =============================================================================
# FILES
# =============================================================================

def save_json(
    data: Any,
    filepath: PathLike,
    indent: int = 2,
    sort_keys: bool = False,
) -> Path:
    """
    Write ``data`` as indented JSON, creating missing parent directories.

    Parameters
    ----------
    data : Any
        Plain dicts/lists plus whatever ``_to_builtin`` understands.
    filepath : str or Path
        Target file; overwritten if present.
    indent : int
        Spaces per nesting level.
    sort_keys : bool
        Write dict keys in sorted order.

    Returns
    -------
    Path
        ``filepath`` as a ``Path``.
    """
    target = Path(filepath)
    ensure_dir(target)
    target.write_text(
        json.dumps(data, indent=indent, sort_keys=sort_keys, default=_to_builtin),
        encoding='utf-8',
    )
    return target


def load_json(filepath: PathLike, default: Any = None) -> Any:
    """
    Parse a JSON file.

    A missing file yields ``default`` when one is given.

    Raises
    ------
    FileNotFoundError
        If the file is missing and ``default`` is None.
    """
    source = Path(filepath)
    if source.is_file():
        return json.loads(source.read_text(encoding='utf-8'))
    if default is None:
        raise FileNotFoundError(f"No such JSON file: {source}")
    return default
