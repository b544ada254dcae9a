"""Manifest endpoints: create, scan, remove, lifecycle transitions, label lookup."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cargo_ops.api.errors import http_error
from cargo_ops.dependencies import get_db, get_manifest_builder
from cargo_ops.errors import CargoOpsError
from cargo_ops.manifest_builder.service import ManifestBuilder, ManifestTransitionResult
from cargo_ops.schemas.manifest import (
    ManifestCreateRequest,
    ManifestItemListResponse,
    ManifestItemResponse,
    ManifestLookupRequest,
    ManifestLookupResponse,
    ManifestResponse,
    ManifestTransitionRequest,
    ManifestTransitionResponse,
)
from cargo_ops.schemas.scan import ManifestScanRequest, ScanResponse

router = APIRouter()


@router.post("", response_model=ManifestResponse, status_code=201)
async def create_manifest(
    request: ManifestCreateRequest,
    db: AsyncSession = Depends(get_db),
    builder: ManifestBuilder = Depends(get_manifest_builder),
) -> ManifestResponse:
    try:
        manifest = await builder.create_manifest(db, request)
    except CargoOpsError as e:
        raise http_error(e) from e
    return ManifestResponse.model_validate(manifest)


@router.post("/lookup", response_model=ManifestLookupResponse)
async def lookup_manifest(
    request: ManifestLookupRequest,
    db: AsyncSession = Depends(get_db),
    builder: ManifestBuilder = Depends(get_manifest_builder),
) -> ManifestLookupResponse:
    """Resolve a scanned manifest label (QR envelope or manifest number)."""
    try:
        manifest = await builder.find_by_scan(db, request.raw)
    except CargoOpsError as e:
        raise http_error(e) from e
    return ManifestLookupResponse(
        manifest=ManifestResponse.model_validate(manifest),
        qr_payload=await builder.qr_payload(db, manifest),
    )


@router.get("/{manifest_id}", response_model=ManifestResponse)
async def get_manifest(
    manifest_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    builder: ManifestBuilder = Depends(get_manifest_builder),
) -> ManifestResponse:
    try:
        manifest = await builder.get_manifest(db, manifest_id)
    except CargoOpsError as e:
        raise http_error(e) from e
    return ManifestResponse.model_validate(manifest)


@router.get("/{manifest_id}/items", response_model=ManifestItemListResponse)
async def list_manifest_items(
    manifest_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    builder: ManifestBuilder = Depends(get_manifest_builder),
) -> ManifestItemListResponse:
    try:
        rows = await builder.list_items(db, manifest_id)
    except CargoOpsError as e:
        raise http_error(e) from e

    items = [
        ManifestItemResponse(
            id=item.id,
            manifest_id=item.manifest_id,
            shipment_id=shipment.id,
            awb_number=shipment.awb_number,
            consignee_name=shipment.consignee_name,
            package_count=shipment.package_count,
            total_weight=shipment.total_weight,
            scanned_by=item.scanned_by,
            scan_source=item.scan_source,
            scanned_at=item.scanned_at,
        )
        for item, shipment in rows
    ]
    return ManifestItemListResponse(manifest_id=manifest_id, items=items, total=len(items))


@router.post("/{manifest_id}/scan", response_model=ScanResponse)
async def scan_shipment(
    manifest_id: uuid.UUID,
    request: ManifestScanRequest,
    db: AsyncSession = Depends(get_db),
    builder: ManifestBuilder = Depends(get_manifest_builder),
) -> ScanResponse:
    """Scan a shipment onto the manifest. Repeat scans report duplicate=true."""
    try:
        return await builder.scan_shipment(
            db,
            manifest_id,
            request.raw,
            staff_id=request.staff_id,
            scan_source=request.scan_source,
            validate_destination=request.validate_destination,
            validate_status=request.validate_status,
        )
    except CargoOpsError as e:
        raise http_error(e) from e


@router.delete("/{manifest_id}/items/{shipment_id}", response_model=ManifestResponse)
async def remove_shipment(
    manifest_id: uuid.UUID,
    shipment_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    builder: ManifestBuilder = Depends(get_manifest_builder),
) -> ManifestResponse:
    try:
        manifest = await builder.remove_shipment(db, manifest_id, shipment_id)
    except CargoOpsError as e:
        raise http_error(e) from e
    return ManifestResponse.model_validate(manifest)


# ── Lifecycle ──


@router.post("/{manifest_id}/close", response_model=ManifestTransitionResponse)
async def close_manifest(
    manifest_id: uuid.UUID,
    request: ManifestTransitionRequest | None = None,
    db: AsyncSession = Depends(get_db),
    builder: ManifestBuilder = Depends(get_manifest_builder),
) -> ManifestTransitionResponse:
    try:
        result = await builder.close_manifest(db, manifest_id, actor=_actor(request))
    except CargoOpsError as e:
        raise http_error(e) from e
    return _transition_response(result)


@router.post("/{manifest_id}/depart", response_model=ManifestTransitionResponse)
async def depart_manifest(
    manifest_id: uuid.UUID,
    request: ManifestTransitionRequest | None = None,
    db: AsyncSession = Depends(get_db),
    builder: ManifestBuilder = Depends(get_manifest_builder),
) -> ManifestTransitionResponse:
    try:
        result = await builder.depart_manifest(db, manifest_id, actor=_actor(request))
    except CargoOpsError as e:
        raise http_error(e) from e
    return _transition_response(result)


@router.post("/{manifest_id}/arrive", response_model=ManifestTransitionResponse)
async def arrive_manifest(
    manifest_id: uuid.UUID,
    request: ManifestTransitionRequest | None = None,
    db: AsyncSession = Depends(get_db),
    builder: ManifestBuilder = Depends(get_manifest_builder),
) -> ManifestTransitionResponse:
    try:
        result = await builder.arrive_manifest(db, manifest_id, actor=_actor(request))
    except CargoOpsError as e:
        raise http_error(e) from e
    return _transition_response(result)


@router.post("/{manifest_id}/reconcile", response_model=ManifestTransitionResponse)
async def reconcile_manifest(
    manifest_id: uuid.UUID,
    request: ManifestTransitionRequest | None = None,
    db: AsyncSession = Depends(get_db),
    builder: ManifestBuilder = Depends(get_manifest_builder),
) -> ManifestTransitionResponse:
    try:
        result = await builder.reconcile_manifest(db, manifest_id, actor=_actor(request))
    except CargoOpsError as e:
        raise http_error(e) from e
    return _transition_response(result)


def _actor(request: ManifestTransitionRequest | None) -> str:
    return request.actor if request else "user"


def _transition_response(result: ManifestTransitionResult) -> ManifestTransitionResponse:
    return ManifestTransitionResponse(
        manifest=ManifestResponse.model_validate(result.manifest),
        shipments_updated=result.shipments_updated,
        tracking_events_created=result.tracking_events_created,
    )
