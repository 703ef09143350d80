# drawings/extraction.py

import io
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

import ezdxf

from .exceptions import DxfParsingError

logger = logging.getLogger(__name__)

INSERT_ENTITY = "INSERT"


@dataclass
class BlockCandidate:
    """A block INSERT pulled out of a DXF document, not yet tied to a file."""

    name: str
    layer: Optional[str]
    coordinates: dict = field(default_factory=dict)

    def as_dict(self) -> dict:
        return {"name": self.name, "layer": self.layer, "coordinates": dict(self.coordinates)}


def parse_document(document_text: str):
    """
    Parses raw DXF text into an ezdxf document.
    Any failure of the parser is reported as a DxfParsingError; there is no
    attempt at partial recovery.
    """
    try:
        return ezdxf.read(io.StringIO(document_text))
    except Exception as e:
        raise DxfParsingError(str(e) or type(e).__name__) from e


def iter_document_entities(doc) -> Iterable[Any]:
    """Yields the entities of the ENTITIES section in document order."""
    yield from doc.modelspace()
    yield from doc.paperspace()


def extract_blocks(document_text: str) -> List[BlockCandidate]:
    """
    Extracts every block INSERT from a DXF document.

    Returns an empty list when the document has no entities or no INSERTs.
    Raises DxfParsingError when the text is not a readable DXF document.
    """
    doc = parse_document(document_text)
    candidates = collect_block_candidates(iter_document_entities(doc))
    if not candidates:
        logger.warning("No block INSERT entities found in document.")
    return candidates


def collect_block_candidates(entities: Iterable[Any]) -> List[BlockCandidate]:
    """
    Scans parsed entities for INSERTs. An INSERT without a block name or an
    insertion point is skipped; the rest of the scan carries on.
    """
    candidates: List[BlockCandidate] = []
    for entity in entities:
        if entity.dxftype() != INSERT_ENTITY:
            continue

        name = entity.dxf.get("name")
        position = entity.dxf.get("insert")
        if not name or position is None:
            logger.warning(
                f"Skipping INSERT entity due to missing name or position: "
                f"handle={entity.dxf.get('handle')} name={name!r} position={position!r}"
            )
            continue

        try:
            coordinates = coerce_point(position)
        except (TypeError, ValueError):
            logger.warning(
                f"Skipping INSERT entity with non-numeric position: "
                f"handle={entity.dxf.get('handle')} name={name!r} position={position!r}"
            )
            continue

        candidates.append(BlockCandidate(
            name=name,
            layer=entity.dxf.get("layer") or None,
            coordinates=coordinates,
        ))
    return candidates


def coerce_point(point) -> dict:
    """Turns a 2D or 3D point into {x, y, z}; missing components become 0."""
    return {
        "x": _component(point, "x", 0),
        "y": _component(point, "y", 1),
        "z": _component(point, "z", 2),
    }


def _component(point, axis: str, index: int) -> float:
    if isinstance(point, dict):
        value = point.get(axis)
    else:
        value = getattr(point, axis, None)
    if value is None and not isinstance(point, dict):
        try:
            value = point[index]
        except (IndexError, KeyError, TypeError):
            value = None
    if value is None:
        return 0.0
    return float(value)
