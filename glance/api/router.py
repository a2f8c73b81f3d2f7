from fastapi import APIRouter

from glance.api.routes import configmaps, deployments, ingresses, namespaces, pods, secrets, services


api_router = APIRouter(prefix="/api/v1")
api_router.include_router(namespaces.router)
api_router.include_router(ingresses.router)
api_router.include_router(pods.router)
api_router.include_router(deployments.router)
api_router.include_router(services.router)
api_router.include_router(configmaps.router)
api_router.include_router(secrets.router)
