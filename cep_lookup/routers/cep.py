from dataclasses import asdict
from fastapi import APIRouter, Depends, HTTPException
from ..schemas import AddressOut, BatchItem, BatchRequest, BatchResponse, CepLookupResponse
from ..services.lookup_service import CepLookupService, LookupErrorKind
from ..core.config import settings
from ..core.security import require_api_key
from ..core.utils import format_cep

router = APIRouter()

ERROR_STATUS = {
    LookupErrorKind.INVALID_FORMAT: 400,
    LookupErrorKind.NOT_FOUND: 404,
    LookupErrorKind.NETWORK_ERROR: 502,
    LookupErrorKind.INVALID_RESPONSE: 502,
}

def service_dep() -> CepLookupService:
    return CepLookupService()

@router.get("/cep/{cep}", response_model=CepLookupResponse)
async def get_cep(
    cep: str,
    _auth = Depends(require_api_key),
    svc: CepLookupService = Depends(service_dep),
):
    result = await svc.fetch_address(cep)
    if not result.ok:
        raise HTTPException(
            status_code=ERROR_STATUS[result.error],
            detail={"kind": result.error.name, "message": result.error.message},
        )
    return {"cep": format_cep(cep), "address": AddressOut(**asdict(result.address))}

@router.post("/cep/batch", response_model=BatchResponse)
async def post_cep_batch(
    body: BatchRequest,
    _auth = Depends(require_api_key),
    svc: CepLookupService = Depends(service_dep),
):
    if len(body.ceps) > settings.BATCH_MAX_ITEMS:
        raise HTTPException(status_code=400, detail=f"at most {settings.BATCH_MAX_ITEMS} CEPs per batch")

    results = await svc.fetch_many(body.ceps)
    items = []
    for raw, res in zip(body.ceps, results):
        if res.ok:
            items.append(BatchItem(input=raw, address=AddressOut(**asdict(res.address))))
        else:
            items.append(BatchItem(input=raw, error=res.error.name, message=res.error.message))
    return {"results": items}
