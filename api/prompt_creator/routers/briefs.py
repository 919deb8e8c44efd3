from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, Response

from ..models.exceptions import ValidationError
from ..models.schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    BriefSessionResponse,
    BriefView,
    CameraUpdate,
    ColorRole,
    ColorToggle,
    GenerateRequest,
    GenerateResponse,
    IdeaUpdate,
    RatioUpdate,
    ReferenceImageUpload,
    StyleTag,
)
from ..services.generation import GenerationService
from ..services.image_analysis import ImageAnalysisAdapter
from ..services.request_builder import parse_reference_image
from ..services.selection import Brief
from ..services.sessions import BriefSession, SessionStore, session_store

router = APIRouter(prefix="/briefs", tags=["briefs"])

_generation_service = GenerationService()
_analysis_adapter = ImageAnalysisAdapter()


def get_session_store() -> SessionStore:
    return session_store


def get_generation_service() -> GenerationService:
    return _generation_service


def get_analysis_adapter() -> ImageAnalysisAdapter:
    return _analysis_adapter


def brief_view(brief: Brief) -> BriefView:
    return BriefView(
        idea=brief.idea,
        style_tags=[tag.value for tag in brief.style_tags],
        background_colors=[c.hex for c in brief.background_colors],
        object_colors=[c.hex for c in brief.object_colors],
        camera=brief.camera.value,
        ratio=brief.ratio.value,
        has_reference_image=brief.reference_image is not None,
    )


def _session_response(session: BriefSession) -> BriefSessionResponse:
    return BriefSessionResponse(
        session_id=session.session_id,
        brief=brief_view(session.state.brief),
        last_result=session.last_result,
    )


@router.post("", response_model=BriefSessionResponse, status_code=201)
async def create_brief(store: SessionStore = Depends(get_session_store)):
    """Start a new, empty brief session."""
    return _session_response(store.create())


@router.get("/{session_id}", response_model=BriefSessionResponse)
async def get_brief(session_id: str, store: SessionStore = Depends(get_session_store)):
    return _session_response(store.get(session_id))


@router.delete("/{session_id}", status_code=204)
async def delete_brief(session_id: str, store: SessionStore = Depends(get_session_store)):
    store.delete(session_id)
    return Response(status_code=204)


@router.put("/{session_id}/idea", response_model=BriefSessionResponse)
async def set_idea(session_id: str, body: IdeaUpdate = Body(...), store: SessionStore = Depends(get_session_store)):
    session = store.get(session_id)
    session.state.set_idea(body.idea)
    return _session_response(session)


@router.put("/{session_id}/camera", response_model=BriefSessionResponse)
async def set_camera(session_id: str, body: CameraUpdate = Body(...), store: SessionStore = Depends(get_session_store)):
    session = store.get(session_id)
    session.state.set_camera(body.camera)
    return _session_response(session)


@router.put("/{session_id}/ratio", response_model=BriefSessionResponse)
async def set_ratio(session_id: str, body: RatioUpdate = Body(...), store: SessionStore = Depends(get_session_store)):
    session = store.get(session_id)
    session.state.set_ratio(body.ratio)
    return _session_response(session)


@router.post("/{session_id}/style-tags/{tag}", response_model=BriefSessionResponse)
async def toggle_style_tag(session_id: str, tag: StyleTag, store: SessionStore = Depends(get_session_store)):
    session = store.get(session_id)
    session.state.toggle_style_tag(tag)
    return _session_response(session)


@router.post("/{session_id}/colors/{role}", response_model=BriefSessionResponse)
async def toggle_color(
    session_id: str,
    role: ColorRole,
    body: ColorToggle = Body(...),
    store: SessionStore = Depends(get_session_store),
):
    """Toggle a manually picked color. It is stored exactly as picked."""
    session = store.get(session_id)
    session.state.toggle_color(role, body.color)
    return _session_response(session)


@router.put("/{session_id}/reference-image", response_model=AnalyzeResponse)
async def set_reference_image(
    session_id: str,
    body: ReferenceImageUpload = Body(...),
    store: SessionStore = Depends(get_session_store),
    adapter: ImageAnalysisAdapter = Depends(get_analysis_adapter),
):
    """Store a reference image and optionally run image analysis on it.

    The image is stored first; if the analysis then fails, the image stays
    and the error is returned.
    """
    session = store.get(session_id)
    image = parse_reference_image(body.image)
    session.state.set_reference_image(image)
    applied = False
    if body.analyze:
        applied = await adapter.analyze_into(session.state, image)
    return AnalyzeResponse(session_id=session_id, applied=applied, brief=brief_view(session.state.brief))


@router.delete("/{session_id}/reference-image", response_model=BriefSessionResponse)
async def clear_reference_image(session_id: str, store: SessionStore = Depends(get_session_store)):
    session = store.get(session_id)
    session.state.clear_reference_image()
    return _session_response(session)


@router.post("/{session_id}/analyze", response_model=AnalyzeResponse)
async def analyze(
    session_id: str,
    body: Optional[AnalyzeRequest] = Body(None),
    store: SessionStore = Depends(get_session_store),
    adapter: ImageAnalysisAdapter = Depends(get_analysis_adapter),
):
    """Analyze an image and replace style tags, colors, camera and ratio."""
    session = store.get(session_id)
    if body is not None and body.image:
        image = parse_reference_image(body.image)
    elif session.state.brief.reference_image is not None:
        image = session.state.brief.reference_image
    else:
        raise ValidationError("image", "no image given and the brief has no reference image")
    applied = await adapter.analyze_into(session.state, image)
    return AnalyzeResponse(session_id=session_id, applied=applied, brief=brief_view(session.state.brief))


@router.post("/{session_id}/generate", response_model=GenerateResponse)
async def generate(
    session_id: str,
    body: Optional[GenerateRequest] = Body(None),
    store: SessionStore = Depends(get_session_store),
    service: GenerationService = Depends(get_generation_service),
):
    """Build the request from the brief, call the model and validate its reply."""
    session = store.get(session_id)
    output_language = body.output_language if body is not None else None
    request, result = await service.generate(session, output_language)
    return GenerateResponse(session_id=session_id, request=request, result=result)


@router.post("/{session_id}/reset", response_model=BriefSessionResponse)
async def reset(session_id: str, store: SessionStore = Depends(get_session_store)):
    """Clear the brief. The last generation result is kept for display."""
    session = store.get(session_id)
    session.state.reset()
    return _session_response(session)
