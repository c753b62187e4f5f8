# reinvent/adapters/api/routers/export.py
from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Response

from reinvent.adapters.api.schemas import ExportRequest
from reinvent.core.use_cases.export_deck import ExportDeck
from reinvent.shared.container import Container

router = APIRouter(tags=["Export"])


@router.post("/export")
@inject
async def export_deck(
    body: ExportRequest,
    use_case: ExportDeck = Depends(Provide[Container.export_use_case]),
) -> Response:
    """Returns the generated results as a .pptx download."""
    deck = await use_case.execute(
        body.title,
        body.invention,
        era=body.era,
        decomposition=body.decomposition,
        simulations=body.simulations,
        narratives=body.narratives,
        images=body.images,
    )
    return Response(
        content=deck.content,
        media_type=deck.media_type,
        headers={"Content-Disposition": f'attachment; filename="{deck.filename}"'},
    )
