from .auth_store import AuthStore
from .clients import AuthClient, FunctionsClient, QueryResult, TableClient
from .config import ClientConfig, ConfigError, load_config
from .exceptions import (
    ApiError,
    AuthError,
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    QueryError,
    RateLimitError,
    ServerError,
    TransportError,
)
from .http_client import HttpClient
from .models import AuthUser, ProvisionResponse, SessionData, TokenResponse
from .models_rows import (
    AreaSalesManagerRow,
    OrderLineRow,
    ProductRow,
    SalesOfficerRow,
    SchemeRow,
    ShopRow,
    VisitRow,
)
from .postgrest import AnyOf, Filter, OrderBy, QuerySpec, parse_content_range
from .session import ApiSession
