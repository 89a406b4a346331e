"""
Host Interfaces
Capabilities the addon needs from the media server
"""
from typing import List, Optional, Protocol
from app.models.jellyfin import ItemQuery, Library, LibraryItem, PlayState, Session, User


class LibraryService(Protocol):
    """User, library and item lookups, already filtered by user permissions"""

    async def get_current_user(self) -> Optional[User]:
        ...

    async def get_user_libraries(self, user: User) -> List[Library]:
        ...

    async def get_item(self, user: User, item_id: str) -> Optional[LibraryItem]:
        ...

    async def get_items(self, user: User, query: ItemQuery) -> List[LibraryItem]:
        ...

    async def get_episodes(self, user: User, series_id: str) -> List[LibraryItem]:
        ...


class SessionService(Protocol):
    """Live session list of the media server"""

    async def list_sessions(self, user: User) -> List[Session]:
        ...

    async def create_session(self, user: User, device_name: str) -> Session:
        ...

    async def update_session(self, session: Session, play_state: Optional[PlayState]) -> None:
        """Set (or clear, with None) the play state and refresh activity"""
        ...


class HostClient(LibraryService, SessionService, Protocol):
    """Per-request connection to the media server"""

    async def close(self) -> None:
        ...
