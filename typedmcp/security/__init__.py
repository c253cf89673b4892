"""Security utilities: SSRF protection for outbound fetches."""

from typedmcp.security.ssrf import SSRFError, validate_url

__all__ = ["SSRFError", "validate_url"]
