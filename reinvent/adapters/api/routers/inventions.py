# reinvent/adapters/api/routers/inventions.py
from typing import Any, Dict

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends

from reinvent.adapters.api.dependencies import RateLimit
from reinvent.adapters.api.schemas import DeconstructRequest, NarrativeRequest, SimulateRequest
from reinvent.core.use_cases.deconstruct_invention import DeconstructInvention
from reinvent.core.use_cases.simulate_pathways import SimulatePathways
from reinvent.core.use_cases.write_narrative import WriteNarrative
from reinvent.shared.container import Container

router = APIRouter(tags=["Inventions"])


@router.post("/deconstruct", dependencies=[Depends(RateLimit("deconstruct"))])
@inject
async def deconstruct(
    body: DeconstructRequest,
    use_case: DeconstructInvention = Depends(Provide[Container.deconstruct_use_case]),
) -> Dict[str, Any]:
    """
    Breaks an invention into functions, materials, sciences and subsystems.
    Returns `{decomposition, cached}`.
    """
    result = await use_case.execute(body.invention)
    return result.model_dump()


@router.post("/simulate", dependencies=[Depends(RateLimit("simulate"))])
@inject
async def simulate(
    body: SimulateRequest,
    use_case: SimulatePathways = Depends(Provide[Container.simulate_use_case]),
) -> Dict[str, Any]:
    """
    Imagines alternate pathways for an invention in an era.
    Returns `{simulations: {pathways: [...]}, cached}`.
    """
    result = await use_case.execute(
        body.invention,
        era=body.era,
        creativity=body.creativity,
        depth=body.depth,
        decomposition=body.decomposition,
    )
    return result.model_dump()


@router.post("/narrative")
@inject
async def narrative(
    body: NarrativeRequest,
    use_case: WriteNarrative = Depends(Provide[Container.narrative_use_case]),
) -> Dict[str, Any]:
    """Writes a history-book entry for one pathway. Returns `{narrative, era, title}`."""
    result = await use_case.execute(body.pathway_data, body.era)
    return result.model_dump()
