"""API router configuration."""

from fastapi import APIRouter, Depends

from app.api.v1.endpoints import (
    appointments,
    clinical_histories,
    debug,
    lab_orders,
    patients,
    procedure_types,
    roles,
    users,
)
from app.dependencies import verify_api_key

# Every prefixed route sits behind the optional x-api-key check
api_router = APIRouter(dependencies=[Depends(verify_api_key)])

# Include routers
api_router.include_router(debug.router)
api_router.include_router(users.router)
api_router.include_router(patients.router)
api_router.include_router(appointments.router)
api_router.include_router(clinical_histories.router)
api_router.include_router(procedure_types.router)
api_router.include_router(lab_orders.router)
api_router.include_router(roles.router)
