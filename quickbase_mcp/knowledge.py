"""
Static SDK knowledge: the feature-to-file map and the reference documents.
"""

from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True)
class FeatureLocation:
    """Where a feature lives in each SDK, relative to the repository root."""
    js_path: str
    go_path: str


FEATURE_MAP = MappingProxyType({
    "ticket-auth": FeatureLocation("src/auth/ticket.ts", "auth/ticket.go"),
    "temp-token": FeatureLocation("src/auth/temp-token.ts", "auth/temp_token.go"),
    "user-token": FeatureLocation("src/auth/user-token.ts", "auth/user_token.go"),
    "sso": FeatureLocation("src/auth/sso.ts", "auth/sso_token.go"),
    "pagination": FeatureLocation("src/client/pagination.ts", "client/pagination.go"),
    "retry": FeatureLocation("src/client/retry.ts", "client/client.go"),
    "throttle": FeatureLocation("src/client/throttle.ts", "client/throttle.go"),
})

FEATURES = tuple(FEATURE_MAP)
REPO_SCOPES = ("js", "go", "spec", "all")
AUTH_TYPES = ("user-token", "temp-token", "sso", "ticket")
LANGUAGES = ("js", "go", "both")
CATEGORIES = ("auth", "client", "pagination", "all")


FEATURES_DOCUMENT = """# QuickBase SDK Features

## Authentication Methods
- ✅ User Token (both JS & Go)
- ✅ Temporary Token (both JS & Go)
- ✅ SSO Token (both JS & Go)
- ✅ Ticket Auth - API_Authenticate (both JS & Go)

## Client Features
- ✅ Retry with exponential backoff (both JS & Go)
- ✅ Rate limiting / throttling (both JS & Go)
- ✅ Automatic date parsing (both JS & Go)
- ✅ Custom error types (both JS & Go)

## Pagination
- ✅ Fluent pagination API (both JS & Go)
- ✅ Auto-pagination (both JS & Go)
- ✅ Manual page iteration (both JS & Go)

## Code Generation
- ✅ TypeScript types from OpenAPI spec (JS)
- ✅ Go types from OpenAPI spec (Go)
- ✅ Shared OpenAPI spec (both)
"""


PARITY_REPORT = """# Feature Parity Check

## ✅ Complete Parity
- User Token Auth
- Temporary Token Auth
- SSO Token Auth
- Ticket Auth (API_Authenticate)
- Retry logic
- Rate limiting
- Date parsing
- Error handling
- Pagination (fluent API)

## 🔄 Differences
- **Browser support**: JS has browser bundles, Go is server-only
- **Testing**: JS uses Vitest, Go uses native testing
- **Generated code**: Different generators (openapi-generator-typescript vs oapi-codegen)

## 📝 Implementation Notes
- Both SDKs share the same OpenAPI spec via git submodule
- Both follow the same architectural patterns
- Both have identical test fixtures (JSON-based)
- Code structure mirrors between languages

## Version Info
- quickbase-js: v2.1.0
- quickbase-go: v1.2.0
"""
