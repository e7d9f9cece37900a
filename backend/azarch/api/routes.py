import logging

from fastapi import APIRouter

from azarch.builder import default_caf_architecture, validate_cidr_ranges
from azarch.model.validation import validate_structure
from azarch.pipeline import PipelineContext, PipelineController
from azarch.schemas import (
    AssessmentDiagramRequest,
    CafDiagramRequest,
    CidrValidationRequest,
    DiagramResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _diagram_payload(context: PipelineContext) -> dict:
    warnings = [f"{f.stage}: {f.message}" for f in context.failures] + list(context.diagnostics)
    validation = validate_structure(context.model) if context.model else None
    if validation is not None:
        logger.info("[API] model validation: %s", validation.get_summary())
    return {
        "status": "warning" if context.failures else "success",
        "diagram": DiagramResponse(
            type=context.export_options.format,
            source=context.document or "",
        ).model_dump(),
        "model": context.model.to_dict() if context.model else None,
        "validation": validation.to_dict() if validation else None,
        "warnings": warnings,
    }


@router.get("/health")
def health():
    return {"status": "ok"}


@router.post("/diagram/assessment")
def diagram_from_assessment(request: AssessmentDiagramRequest):
    try:
        context = PipelineController().run(
            request.assessment,
            builder=request.builder,
            diagram_options=request.options,
            layout_options=request.layout,
            export_options=request.export,
        )
        return _diagram_payload(context)

    except Exception as e:
        logger.exception("[API] assessment diagram failed")
        return {"status": "error", "message": str(e)}


@router.post("/diagram/caf")
def diagram_from_caf(request: CafDiagramRequest):
    try:
        architecture = request.architecture or default_caf_architecture()
        context = PipelineController().run(
            architecture,
            builder="caf",
            diagram_options=request.options,
            layout_options=request.layout,
            export_options=request.export,
        )
        payload = _diagram_payload(context)
        payload["validation_errors"] = context.validation_errors
        payload["meta"] = context.meta.model_dump(by_alias=True) if context.meta else None
        return payload

    except Exception as e:
        logger.exception("[API] CAF diagram failed")
        return {"status": "error", "message": str(e)}


@router.post("/validate/cidr")
def validate_cidr(request: CidrValidationRequest):
    try:
        errors = validate_cidr_ranges(request.architecture)
        return {"is_valid": not errors, "errors": errors}

    except Exception as e:
        logger.exception("[API] CIDR validation failed")
        return {"status": "error", "message": str(e)}
