from fastapi import APIRouter

from .v1 import export

router = APIRouter()

router.include_router(export.router, prefix="/export", tags=["export"])
