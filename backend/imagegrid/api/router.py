from fastapi import APIRouter

from imagegrid.api import image_proxy, search

api_router = APIRouter(prefix="/api")

api_router.include_router(search.router, prefix="/search", tags=["Search"])
api_router.include_router(image_proxy.router, prefix="/image-proxy", tags=["Image Proxy"])
