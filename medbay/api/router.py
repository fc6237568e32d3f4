from fastapi import APIRouter
from medbay.api.endpoints import assistant, crew, inventory, logs, supplies

api_router = APIRouter()

# Combine all sub-routers into one
api_router.include_router(assistant.router)
api_router.include_router(supplies.router)
api_router.include_router(inventory.router)
api_router.include_router(crew.router)
api_router.include_router(logs.router)
