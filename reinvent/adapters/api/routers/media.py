# reinvent/adapters/api/routers/media.py
from typing import Any, Dict, Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, File, UploadFile

from reinvent.adapters.api.dependencies import RateLimit
from reinvent.adapters.api.schemas import ImageRequest
from reinvent.core.use_cases.generate_image import GenerateImage
from reinvent.core.use_cases.transcribe_audio import TranscribeAudio
from reinvent.shared.container import Container

router = APIRouter(tags=["Media"])


@router.post("/generate-image", dependencies=[Depends(RateLimit("image"))])
@inject
async def generate_image(
    body: ImageRequest,
    use_case: GenerateImage = Depends(Provide[Container.generate_image_use_case]),
) -> Dict[str, Any]:
    result = await use_case.execute(
        body.prompt,
        style=body.style,
        size=body.size,
        pathway=body.pathway_data,
        era=body.era,
    )
    return result.model_dump()


@router.post("/transcribe")
@inject
async def transcribe(
    audio: Optional[UploadFile] = File(default=None),
    use_case: TranscribeAudio = Depends(Provide[Container.transcribe_use_case]),
) -> Dict[str, Any]:
    """Multipart upload, field `audio`. Returns `{text, cached}`."""
    if audio is None:
        result = await use_case.execute(None)
    else:
        content = await audio.read()
        result = await use_case.execute(content, filename=audio.filename, content_type=audio.content_type)
    return result.model_dump()
