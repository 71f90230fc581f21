"""
deps.py – Dependency wiring: singleton service instances.
Built once when the server starts; routes reach them through the getters.
"""
from . import config
from .core.search import SearchService
from .core.square import SquareClient
from .core.sync import CatalogSync
from .db.catalog import CatalogStore
from .handlers.search_handler import SearchHandler
from .handlers.suggest_handler import SuggestHandler
from .handlers.sync_handler import SyncHandler

# ── Core singletons ────────────────────────────────────────────────────────────

_store  = CatalogStore(config.DATABASE_URL)
_search = SearchService(_store)
_square = SquareClient(
    access_token=config.SQUARE_ACCESS_TOKEN,
    environment=config.SQUARE_ENVIRONMENT,
    api_version=config.SQUARE_API_VERSION,
)
_sync = CatalogSync(_store)

# ── Handler singletons ─────────────────────────────────────────────────────────

_search_h  = SearchHandler(_search)
_suggest   = SuggestHandler()
_sync_h    = SyncHandler(_square, _sync, config.SQUARE_WEBHOOK_SIGNATURE_KEY)


# ── Getters (used by routes) ───────────────────────────────────────────────────

def get_store()          -> CatalogStore:   return _store
def get_search()         -> SearchService:  return _search
def get_search_handler() -> SearchHandler:  return _search_h
def get_suggest_handler()-> SuggestHandler: return _suggest
def get_sync_handler()   -> SyncHandler:    return _sync_h
