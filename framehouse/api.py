from fastapi import APIRouter

from framehouse.module import all_modules

api_router = APIRouter()

for discovered in all_modules:
    api_router.include_router(discovered.router)
