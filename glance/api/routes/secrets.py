from fastapi import APIRouter, Depends, status
from kubernetes.client import V1Secret

from glance.dependencies import get_secret_operations
from glance.schemas.common import APIResponse, deleted, ok
from glance.schemas.kubernetes import SecretCreate, SecretUpdate
from glance.services.k8s import SecretOperations
from glance.services.k8s.config_operations import secret_from_request, secret_overlay
from glance.services.k8s.utils import calculate_age, safe_dict


router = APIRouter(prefix="/secrets/namespaces/{namespace}", tags=["secrets"])


def _summary(secret: V1Secret) -> dict:
    md = secret.metadata
    return {
        "name": md.name,
        "namespace": md.namespace,
        "type": secret.type,
        "creationTime": md.creation_timestamp,
        "age": calculate_age(md.creation_timestamp),
        "labels": safe_dict(md.labels),
    }


def _detail(secret: V1Secret) -> dict:
    return {
        **_summary(secret),
        "annotations": safe_dict(secret.metadata.annotations),
        "resourceVersion": secret.metadata.resource_version,
    }


@router.get("", response_model=APIResponse, summary="List secrets (values redacted)")
async def list_secrets(namespace: str, ops: SecretOperations = Depends(get_secret_operations)) -> APIResponse:
    return ok([_summary(s) for s in await ops.list_secrets(namespace)])


@router.post("", response_model=APIResponse, status_code=status.HTTP_201_CREATED, summary="Create a secret")
async def create_secret(
    namespace: str,
    payload: SecretCreate,
    ops: SecretOperations = Depends(get_secret_operations),
) -> APIResponse:
    created = await ops.create_secret(namespace, secret_from_request(namespace, payload))
    return ok(_detail(created))


@router.get("/{name}", response_model=APIResponse, summary="Get a secret (values redacted)")
async def get_secret(namespace: str, name: str, ops: SecretOperations = Depends(get_secret_operations)) -> APIResponse:
    return ok(_detail(await ops.get_secret(namespace, name)))


@router.put("/{name}", response_model=APIResponse, summary="Partially update a secret")
async def update_secret(
    namespace: str,
    name: str,
    payload: SecretUpdate,
    ops: SecretOperations = Depends(get_secret_operations),
) -> APIResponse:
    updated = await ops.update_secret(
        namespace, name, secret_overlay(payload), resource_version=payload.resource_version
    )
    return ok(_detail(updated))


@router.delete("/{name}", response_model=APIResponse, summary="Delete a secret")
async def delete_secret(
    namespace: str, name: str, ops: SecretOperations = Depends(get_secret_operations)
) -> APIResponse:
    await ops.delete_secret(namespace, name)
    return deleted("Secret", namespace, name)


@router.get("/{name}/keys", response_model=APIResponse, summary="Secret key names")
async def get_secret_keys(
    namespace: str, name: str, ops: SecretOperations = Depends(get_secret_operations)
) -> APIResponse:
    return ok(await ops.get_secret_keys(namespace, name))


@router.get("/{name}/usage", response_model=APIResponse, summary="Pods referencing a secret")
async def get_secret_usage(
    namespace: str, name: str, ops: SecretOperations = Depends(get_secret_operations)
) -> APIResponse:
    return ok(await ops.get_secret_usage(namespace, name))
