from fastapi import APIRouter, Depends, Query
from marketplace.api.v1.errors import to_http_exception
from marketplace.api.v1.schemas import CatalogEntrySchema, LocationQuerySchema, LocationResolutionSchema
from marketplace.wiring.dependencies import get_catalog_resolver, get_location_resolver
from marketplace.application.use_cases.catalog_resolver import CatalogResolver
from marketplace.application.use_cases.location_resolver import LocationResolver
from marketplace.application.exceptions import MarketplaceError
from marketplace.domain.entities.catalog import CatalogFilters
from marketplace.domain.entities.location_session import LocationQuery
from marketplace.domain.entities.service_area import Coordinates

router = APIRouter()


@router.post("/locations/resolve", response_model=LocationResolutionSchema)
async def resolve_location(
    req: LocationQuerySchema,
    resolver: LocationResolver = Depends(get_location_resolver),
):
    coordinates = Coordinates(lat=req.lat, lng=req.lng) if req.lat is not None else None
    try:
        resolution = await resolver.resolve_location(
            LocationQuery(pincode=req.pincode, city=req.city, coordinates=coordinates)
        )
    except MarketplaceError as e:
        raise to_http_exception(e)

    return LocationResolutionSchema.from_resolution(resolution)


@router.get("/service-areas/{service_area_id}/catalog", response_model=list[CatalogEntrySchema])
async def resolve_catalog(
    service_area_id: str,
    service_type: str,
    category_id: str | None = None,
    search: str | None = None,
    limit: int | None = Query(None),
    offset: int = 0,
    resolver: CatalogResolver = Depends(get_catalog_resolver),
):
    filters = CatalogFilters(category_id=category_id, search_term=search, limit=limit, offset=offset)
    try:
        entries = await resolver.resolve_catalog(service_area_id, service_type, filters)
    except MarketplaceError as e:
        raise to_http_exception(e)

    return [CatalogEntrySchema.from_entry(e) for e in entries]
