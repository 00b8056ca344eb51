from typing import List

from fastapi import APIRouter, Depends, HTTPException

from spice_store.api.deps import get_store
from spice_store.models.schemas import ProductOut

router = APIRouter()


def with_variants(store, product: dict) -> dict:
    return {**product, "variants": store.list_variants(product["id"])}


@router.get("", response_model=List[ProductOut])
def list_products(store=Depends(get_store)):
    return [with_variants(store, p) for p in store.list_products()]


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: str, store=Depends(get_store)):
    product = store.get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return with_variants(store, product)
