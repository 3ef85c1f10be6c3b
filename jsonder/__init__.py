"""JSON envelope and request validation adapter for FastAPI routes."""

from jsonder.core.config import GenerateUrls
from jsonder.core.config import JsonderSettings
from jsonder.core.config import get_settings
from jsonder.core.endpoint import EndpointContext
from jsonder.core.endpoint import EndpointDefinition
from jsonder.core.endpoint import Jsonder
from jsonder.core.endpoint import jsonder
from jsonder.core.errors import APIError
from jsonder.core.errors import NotFoundError
from jsonder.core.errors import register_error_handlers
from jsonder.core.responses import aggregate_status
from jsonder.core.result import Failure
from jsonder.core.result import Outcome
from jsonder.core.result import Success
from jsonder.core.result import failure
from jsonder.core.result import success
from jsonder.core.validation import Validation
from jsonder.schemas.error import EndpointError
from jsonder.schemas.error import Resource

__all__ = [
    "APIError",
    "EndpointContext",
    "EndpointDefinition",
    "EndpointError",
    "Failure",
    "GenerateUrls",
    "Jsonder",
    "JsonderSettings",
    "NotFoundError",
    "Outcome",
    "Resource",
    "Success",
    "Validation",
    "aggregate_status",
    "failure",
    "get_settings",
    "jsonder",
    "register_error_handlers",
    "success",
]
