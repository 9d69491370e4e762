"""Repository pattern implementations."""

from spotboard.data.supabase.repositories.start_px_repo import StartPxRepository
from spotboard.data.supabase.repositories.token_repo import TokenRepository

__all__ = ["StartPxRepository", "TokenRepository"]
