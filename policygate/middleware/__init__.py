"""Resolution middleware."""

from policygate.middleware.authorize import Authorize, AuthorizeOptions, authorize

__all__ = ["Authorize", "AuthorizeOptions", "authorize"]
