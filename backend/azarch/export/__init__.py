import logging
from typing import Optional

from azarch.export.drawio import to_drawio_xml
from azarch.export.flow import to_flow_graph, to_flow_json
from azarch.export.plantuml import to_plantuml
from azarch.export.svg import to_svg
from azarch.export.validation import validate_for_export
from azarch.model.types import ArchitectureModel
from azarch.schemas import ExportOptions

logger = logging.getLogger(__name__)

EXPORTERS = {
    "drawio": to_drawio_xml,
    "plantuml": to_plantuml,
    "svg": to_svg,
    "flow": lambda model, options: to_flow_json(model),
}


def export_model(model: ArchitectureModel, options: Optional[ExportOptions] = None) -> str:
    opts = options or ExportOptions()
    logger.info("[Exporter] exporting %d nodes as %s", len(model.nodes), opts.format)
    return EXPORTERS[opts.format](model, opts)


def empty_document(options: Optional[ExportOptions] = None) -> str:
    """A valid document with nothing in it, in the requested format."""
    return export_model(ArchitectureModel(), options)


__all__ = [
    "EXPORTERS",
    "empty_document",
    "export_model",
    "to_drawio_xml",
    "to_flow_graph",
    "to_plantuml",
    "to_svg",
    "validate_for_export",
]
