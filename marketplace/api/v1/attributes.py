from fastapi import APIRouter, Depends, HTTPException, Query
from marketplace.api.v1.errors import to_http_exception
from marketplace.api.v1.schemas import (
    AddBindingsSchema, BindingPatchSchema, BindingSchema,
    DefinitionCreateSchema, DefinitionPatchSchema, DefinitionSchema,
    FieldErrorSchema, FormValidationSchema, FormValuesSchema,
    MoveBindingSchema, MoveResultSchema, PreviewFieldSchema,
    RemoveResultSchema, ResolvedFieldSchema, SyncResultSchema,
)
from marketplace.wiring.dependencies import get_attribute_registry, get_binding_resolver
from marketplace.application.use_cases.attribute_registry import AttributeRegistry
from marketplace.application.use_cases.binding_resolver import AttributeBindingResolver
from marketplace.application.use_cases.form_schema import generate_preview, validate_values
from marketplace.application.exceptions import MarketplaceError

router = APIRouter()


@router.get("/service-types/{service_type_id}/fields", response_model=list[ResolvedFieldSchema])
async def resolve_fields(
    service_type_id: str,
    resolver: AttributeBindingResolver = Depends(get_binding_resolver),
):
    try:
        fields = await resolver.resolve_bindings(service_type_id)
    except MarketplaceError as e:
        raise to_http_exception(e)

    return [ResolvedFieldSchema.from_field(f) for f in fields]


@router.get("/service-types/{service_type_id}/form-preview", response_model=list[PreviewFieldSchema])
async def form_preview(
    service_type_id: str,
    resolver: AttributeBindingResolver = Depends(get_binding_resolver),
):
    try:
        fields = await resolver.resolve_bindings(service_type_id)
    except MarketplaceError as e:
        raise to_http_exception(e)

    return [PreviewFieldSchema.from_preview(p) for p in generate_preview(fields)]


@router.post("/service-types/{service_type_id}/form-validate", response_model=FormValidationSchema)
async def validate_form(
    service_type_id: str,
    req: FormValuesSchema,
    resolver: AttributeBindingResolver = Depends(get_binding_resolver),
):
    try:
        fields = await resolver.resolve_bindings(service_type_id)
    except MarketplaceError as e:
        raise to_http_exception(e)

    errors = validate_values(fields, req.values)
    return FormValidationSchema(valid=not errors, errors=[FieldErrorSchema.from_error(e) for e in errors])


@router.post(
    "/service-types/{service_type_id}/bindings",
    response_model=list[BindingSchema],
    status_code=201,
)
async def add_bindings(
    service_type_id: str,
    req: AddBindingsSchema,
    resolver: AttributeBindingResolver = Depends(get_binding_resolver),
):
    try:
        created = await resolver.add_bindings(service_type_id, req.attribute_ids)
    except MarketplaceError as e:
        raise to_http_exception(e)

    return [BindingSchema.from_binding(b) for b in created]


@router.patch("/bindings/{binding_id}", response_model=BindingSchema)
async def update_binding(
    binding_id: str,
    req: BindingPatchSchema,
    resolver: AttributeBindingResolver = Depends(get_binding_resolver),
):
    try:
        updated = await resolver.update_binding(binding_id, req.model_dump(mode="json", exclude_unset=True))
    except MarketplaceError as e:
        raise to_http_exception(e)

    return BindingSchema.from_binding(updated)


@router.post(
    "/service-types/{service_type_id}/bindings/{attribute_id}/move",
    response_model=MoveResultSchema,
)
async def move_binding(
    service_type_id: str,
    attribute_id: str,
    req: MoveBindingSchema,
    resolver: AttributeBindingResolver = Depends(get_binding_resolver),
):
    try:
        moved = await resolver.reorder(service_type_id, attribute_id, req.direction)
    except MarketplaceError as e:
        raise to_http_exception(e)

    return MoveResultSchema(moved=moved)


@router.delete("/service-types/{service_type_id}/bindings", response_model=RemoveResultSchema)
async def remove_bindings(
    service_type_id: str,
    attribute_ids: list[str] = Query([]),
    resolver: AttributeBindingResolver = Depends(get_binding_resolver),
):
    try:
        removed = await resolver.remove_bindings(service_type_id, attribute_ids)
    except MarketplaceError as e:
        raise to_http_exception(e)

    return RemoveResultSchema(removed=removed)


@router.get("/attributes", response_model=list[DefinitionSchema])
async def list_definitions(
    entity_type: str | None = None,
    include_inactive: bool = False,
    registry: AttributeRegistry = Depends(get_attribute_registry),
):
    try:
        definitions = await registry.list_definitions(entity_type=entity_type, active_only=not include_inactive)
    except MarketplaceError as e:
        raise to_http_exception(e)

    return [DefinitionSchema.from_definition(d) for d in definitions]


@router.post("/attributes", response_model=DefinitionSchema, status_code=201)
async def create_definition(
    req: DefinitionCreateSchema,
    registry: AttributeRegistry = Depends(get_attribute_registry),
):
    try:
        created = await registry.create_definition(**req.model_dump())
    except MarketplaceError as e:
        raise to_http_exception(e)

    return DefinitionSchema.from_definition(created)


@router.patch("/attributes/{definition_id}", response_model=DefinitionSchema)
async def update_definition(
    definition_id: str,
    req: DefinitionPatchSchema,
    registry: AttributeRegistry = Depends(get_attribute_registry),
):
    patch = req.model_dump(exclude_unset=True)
    if not patch:
        raise HTTPException(status_code=422, detail="Patch must not be empty")
    try:
        updated = await registry.update_definition(definition_id, patch)
    except MarketplaceError as e:
        raise to_http_exception(e)

    return DefinitionSchema.from_definition(updated)


@router.post("/service-types/{service_type_id}/presets/sync", response_model=SyncResultSchema)
async def sync_presets(
    service_type_id: str,
    registry: AttributeRegistry = Depends(get_attribute_registry),
):
    try:
        result = await registry.sync_presets(service_type_id)
    except MarketplaceError as e:
        raise to_http_exception(e)

    return SyncResultSchema(
        service_type_id=result.service_type_id,
        created=result.created,
        updated=result.updated,
    )
