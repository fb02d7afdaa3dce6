"""
Merges probe fragments into the final :class:`ScanReport`.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import fields
from typing import Any

from phantompulse.models.report import ReportFragment, ScanReport

_SEQUENCE_FIELDS: tuple[str, ...] = tuple(
    f.name for f in fields(ReportFragment) if f.default == ()
)
_SCALAR_FIELDS: tuple[str, ...] = tuple(
    f.name for f in fields(ReportFragment) if f.name not in _SEQUENCE_FIELDS
)


def merge_fragments(fragments: Iterable[ReportFragment]) -> ScanReport:
    """Fold *fragments* into one report.

    Sequences are concatenated in fragment order, so the caller controls the
    order of shared sections such as ``vulnerabilities``.  Scalar sections
    take the last non-``None`` contribution.  Any section no fragment
    contributes keeps the :class:`ScanReport` default, so the result always
    has the full shape.
    """
    sequences: dict[str, list[Any]] = {name: [] for name in _SEQUENCE_FIELDS}
    scalars: dict[str, Any] = {}

    for fragment in fragments:
        for name in _SEQUENCE_FIELDS:
            sequences[name].extend(getattr(fragment, name))
        for name in _SCALAR_FIELDS:
            value = getattr(fragment, name)
            if value is not None:
                scalars[name] = value

    return ScanReport(
        **{name: tuple(values) for name, values in sequences.items()},
        **scalars,
    )
