from fastapi import APIRouter

from cargo_ops.api.v1 import health, invoices, manifests, scans, shipments

api_router = APIRouter()

api_router.include_router(health.router, prefix="/v1", tags=["health"])
api_router.include_router(shipments.router, prefix="/v1/shipments", tags=["shipments"])
api_router.include_router(scans.router, prefix="/v1/scans", tags=["scans"])
api_router.include_router(manifests.router, prefix="/v1/manifests", tags=["manifests"])
api_router.include_router(invoices.router, prefix="/v1/invoices", tags=["invoices"])
