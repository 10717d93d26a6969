"""Error taxonomy for the integration backend.

Every error carries the HTTP status it maps to and a short public message.
The exception text (``str(exc)``) may hold internal detail for logs only.
"""


class IntegrationError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    message: str = "Internal error"

    def __init__(self, message: str | None = None, *, detail: str | None = None):
        self.message = message or type(self).message
        super().__init__(detail or self.message)


class AuthInvalid(IntegrationError):
    """Bearer token is missing, malformed or fails verification."""

    status_code = 401
    message = "Invalid token"


class ValidationFailed(IntegrationError):
    """Request body does not match the expected shape."""

    status_code = 400
    message = "Invalid request body"


class NotFound(IntegrationError):
    """Installation or resource is absent or soft-deleted."""

    status_code = 404
    message = "Not found"


class UnknownBillingPlan(IntegrationError):
    """Requested billing plan is not in the catalog."""

    status_code = 400
    message = "Unknown billing plan"

    def __init__(self, plan_id: str):
        self.plan_id = plan_id
        super().__init__(detail=f"Unknown billing plan {plan_id}")


class UpstreamCallFailed(IntegrationError):
    """A call to Vercel or Entrolytics returned a non-success response."""

    status_code = 502
    message = "Upstream request failed"

    def __init__(self, detail: str, *, upstream_status: int | None = None):
        self.upstream_status = upstream_status
        super().__init__(detail=detail)


class CredentialMissing(UpstreamCallFailed):
    """No stored access token for the installation."""

    def __init__(self, installation_id: str):
        self.installation_id = installation_id
        super().__init__(f"No access token found for installation {installation_id}")


class InvalidSignature(IntegrationError):
    """Webhook body signature does not match."""

    status_code = 401
    message = "Signature didn't match"
