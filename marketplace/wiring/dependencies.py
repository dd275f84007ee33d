from functools import lru_cache
import logging

from marketplace.core.config import settings
from marketplace.application.ports.attribute_store import AttributeStorePort
from marketplace.application.ports.catalog_store import CatalogStorePort
from marketplace.application.ports.geocoder import GeocoderPort
from marketplace.application.ports.service_area_store import ServiceAreaStorePort
from marketplace.application.use_cases.attribute_registry import AttributeRegistry
from marketplace.application.use_cases.binding_resolver import AttributeBindingResolver
from marketplace.application.use_cases.catalog_resolver import CatalogResolver
from marketplace.application.use_cases.location_resolver import LocationResolver
from marketplace.infrastructure.geocoding.nominatim import NominatimGeocoder
from marketplace.infrastructure.store.seed_data import build_memory_stores
from marketplace.infrastructure.supabase.client import SupabaseClient
from marketplace.infrastructure.supabase.stores import (
    SupabaseAttributeStore,
    SupabaseCatalogStore,
    SupabaseServiceAreaStore,
)


@lru_cache
def get_stores() -> tuple[AttributeStorePort, ServiceAreaStorePort, CatalogStorePort]:
    logger = logging.getLogger(__name__)
    provider = settings.STORE_PROVIDER.lower()
    if provider == "supabase":
        logger.info("Using Supabase stores")
        client = SupabaseClient()
        return (
            SupabaseAttributeStore(client),
            SupabaseServiceAreaStore(client),
            SupabaseCatalogStore(client),
        )
    if provider != "memory":
        raise ValueError(f"Unknown STORE_PROVIDER {settings.STORE_PROVIDER!r}")
    logger.info("Using seeded in-memory stores (ENV=%s)", settings.ENV)
    return build_memory_stores()


def get_attribute_store() -> AttributeStorePort:
    return get_stores()[0]


def get_service_area_store() -> ServiceAreaStorePort:
    return get_stores()[1]


def get_catalog_store() -> CatalogStorePort:
    return get_stores()[2]


@lru_cache
def get_geocoder() -> GeocoderPort:
    return NominatimGeocoder()


@lru_cache
def get_attribute_registry() -> AttributeRegistry:
    return AttributeRegistry(store=get_attribute_store())


@lru_cache
def get_binding_resolver() -> AttributeBindingResolver:
    # Singleton so the per-service-type locks are shared by every request.
    return AttributeBindingResolver(store=get_attribute_store())


@lru_cache
def get_location_resolver() -> LocationResolver:
    return LocationResolver(
        store=get_service_area_store(),
        geocoder=get_geocoder(),
        nearest_max_km=settings.NEAREST_AREA_MAX_KM,
    )


@lru_cache
def get_catalog_resolver() -> CatalogResolver:
    return CatalogResolver(
        catalog=get_catalog_store(),
        areas=get_service_area_store(),
        default_limit=settings.CATALOG_DEFAULT_LIMIT,
        max_limit=settings.CATALOG_MAX_LIMIT,
    )
