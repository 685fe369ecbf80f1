import logging
from typing import Optional

from supabase import AsyncClient, acreate_client

from apps.backend.config.settings import Settings
from apps.backend.services.errors import StoreUnavailable
from apps.backend.store.document_store import DocumentStore
from apps.backend.store.memory_store import InMemoryDocumentStore
from apps.backend.store.supabase_store import SupabaseDocumentStore

log = logging.getLogger("goldrewards.db")


async def get_supabase(settings: Settings) -> Optional[AsyncClient]:
    if not (settings.SUPABASE_URL and settings.SUPABASE_SERVICE_ROLE_KEY):
        return None
    return await acreate_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)


async def create_document_store(settings: Settings) -> DocumentStore:
    if settings.STORE_BACKEND == "memory":
        log.warning("Using in-memory document store; data is lost on restart")
        return InMemoryDocumentStore()

    client = await get_supabase(settings)
    if client is None:
        raise StoreUnavailable(
            "Supabase not configured: set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY (or SUPABASE_ANON_KEY)."
        )
    log.info("Supabase document store ready (%s)", settings.SUPABASE_URL)
    return SupabaseDocumentStore(client, table_prefix=settings.SUPABASE_TABLE_PREFIX)
