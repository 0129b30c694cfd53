"""
API routers module.
"""
from app.api.calculation_logs import router as calculation_logs_router
from app.api.calculations import router as calculations_router
from app.api.facilities import router as facilities_router
from app.api.factors import router as factors_router

__all__ = [
    "calculation_logs_router",
    "calculations_router",
    "facilities_router",
    "factors_router",
]
