import logging

from fastapi import FastAPI

from marketplace.api.v1.attributes import router as attributes_router
from marketplace.api.v1.storefront import router as storefront_router
from marketplace.core.config import settings

class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in (
            "service_type_id",
            "service_area_id",
            "attribute_id",
            "service",
            "request_seq",
            "pincode",
            "reason",
            "attribute_name",
            "direction",
            "count",
            "custom",
            "created_count",
            "updated_count",
            "path",
            "status",
        ):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

app = FastAPI(title="Marketplace Resolvers", version="1.0.0")

app.include_router(attributes_router, prefix="/v1", tags=["attributes"])
app.include_router(storefront_router, prefix="/v1", tags=["storefront"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "store": settings.STORE_PROVIDER}
