"""
Automatic proof layout.

Sizes each column from the longest value it holds (capped per column), then
picks page orientation and zoom so the table fits an A4 page.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from proofspec.core.enums import PageOrientation
from proofspec.core.schemas import ProofLayoutField

A4_WIDTH_PIXELS = 794
A4_LENGTH_PIXELS = 1123
# One pixel per character is too narrow; 7.5 leaves room for a glyph
CHARACTER_WIDTH_FACTOR = 7.5
COLUMN_BUFFER_PIXELS = 4
COLUMN_MAX_WIDTH_FACTOR = 2.5
DEFAULT_MAX_ZOOM = 0.75


@dataclass
class LayoutInfo:
    fields: list[ProofLayoutField]
    orientation: PageOrientation
    zoom: float


def _data_length(value: Any, max_length: float) -> float:
    if not value:
        return 0
    return min(len(str(value)), max_length)


def _field_width(length: float) -> int:
    return math.ceil(length * CHARACTER_WIDTH_FACTOR + COLUMN_BUFFER_PIXELS)


def calc_layout_info(
    fields: Sequence[ProofLayoutField],
    rows: Sequence[Mapping[str, Any]],
    max_zoom: float = DEFAULT_MAX_ZOOM,
) -> LayoutInfo:
    """
    Compute column widths, orientation and zoom for a proof.

    Returns new field objects with `width` set in pixels (e.g. "64px");
    the input fields are not modified. Zoom never drops below max_zoom.
    """
    if not fields:
        return LayoutInfo(fields=[], orientation=PageOrientation.PORTRAIT, zoom=1)

    max_width = (A4_LENGTH_PIXELS / len(fields)) * COLUMN_MAX_WIDTH_FACTOR
    max_length = max_width / CHARACTER_WIDTH_FACTOR

    lengths = {field.property: _data_length(field.label, max_length) for field in fields}
    for row in rows:
        for prop, value in row.items():
            # Columns with an empty label are not sized from data
            if lengths.get(prop):
                lengths[prop] = max(lengths[prop], _data_length(value, max_length))

    sized = [
        field.model_copy(update={"width": f"{_field_width(lengths[field.property])}px"})
        for field in fields
    ]

    proof_width = sum(_field_width(length) for length in lengths.values())
    orientation = (
        PageOrientation.PORTRAIT if proof_width <= A4_WIDTH_PIXELS else PageOrientation.LANDSCAPE
    )
    zoom = 1 if proof_width < A4_LENGTH_PIXELS else A4_LENGTH_PIXELS / proof_width
    return LayoutInfo(fields=sized, orientation=orientation, zoom=max(zoom, max_zoom))
