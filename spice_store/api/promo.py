from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from spice_store.api.deps import get_promo_validator
from spice_store.models.schemas import PromoIn, PromoOut

router = APIRouter()


@router.post("/validate", response_model=PromoOut)
def validate_promo(payload: PromoIn, promo=Depends(get_promo_validator)):
    if not (payload.code or "").strip():
        return JSONResponse(status_code=400, content={"valid": False, "message": "Code is required"})
    result = promo.validate(payload.code)
    return {"valid": result.valid, "message": result.message}
