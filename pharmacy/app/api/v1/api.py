from fastapi import APIRouter

from pharmacy.app.api.v1.endpoints import reports, stock, suppliers

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(stock.router, prefix="/stock", tags=["stock"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
api_router.include_router(suppliers.router, prefix="/suppliers", tags=["suppliers"])
