from .auth import AuthClient
from .base import BaseClient
from .functions import FunctionsClient
from .tables import QueryResult, TableClient

__all__ = ["AuthClient", "BaseClient", "FunctionsClient", "QueryResult", "TableClient"]
