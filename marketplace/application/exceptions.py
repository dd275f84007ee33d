class MarketplaceError(RuntimeError):
    """Base class for errors surfaced by the attribute and catalog resolvers."""
    pass


class NotFoundError(MarketplaceError):
    """Raised when a service type, definition, binding or service area does not exist."""
    pass


class ConflictError(MarketplaceError):
    """Raised when a write collides with existing state (duplicate binding, bound rename)."""
    pass


class ForbiddenError(MarketplaceError):
    """Raised on any attempt to mutate a mandatory system field."""
    pass


class ValidationError(MarketplaceError):
    """Raised when input is malformed (bad patch keys, bad direction, out-of-range values)."""
    pass


class UpstreamUnavailable(MarketplaceError):
    """Raised when the persistence or geocoding backend fails (timeouts, network errors, 5xx)."""
    pass
