"""
Playback Session Shadow
Keeps a synthetic device session in Jellyfin so Stremio playback shows up as
an active device. Jellyfin never sees the real player, so every transition is
driven by stream lookups and the client's progress/stop reports.

States:
    absent   no session for (user, device name)
    idle     session exists without a play state
    playing  session exists with a play state

All operations are best-effort: failures are logged and never raised.
"""
import logging
from typing import Optional
from app.core.config import settings
from app.models.jellyfin import LibraryItem, PlayState, Session, User
from app.services.host import SessionService
from app.utils.helpers import ticks_to_seconds

logger = logging.getLogger(__name__)


class SessionShadow:
    """Drives the synthetic device session of one host connection"""

    def __init__(self, sessions: SessionService, device_name: Optional[str] = None):
        self.sessions = sessions
        self.device_name = device_name or settings.DEVICE_NAME

    async def find(self, user: User) -> Optional[Session]:
        """The user's session for the synthetic device, if any"""
        matching = [
            s for s in await self.sessions.list_sessions(user)
            if s.device_name == self.device_name
        ]
        if len(matching) > 1:
            logger.debug(f"Found {len(matching)} {self.device_name} sessions for {user.name}, using first")
        return matching[0] if matching else None

    async def _create(self, user: User) -> Session:
        logger.info(f"No {self.device_name} session for {user.name}, creating one")
        return await self.sessions.create_session(user, self.device_name)

    async def on_stream_resolved(self, user: User, item: LibraryItem) -> None:
        """absent -> idle, otherwise refresh activity keeping the play state"""
        try:
            session = await self.find(user)
            if session is None:
                await self._create(user)
            else:
                await self.sessions.update_session(session, session.play_state)
            logger.debug(f"Session active for {user.name}: {item.name} ({item.id})")
        except Exception as e:
            logger.warning(f"Failed to report stream to Jellyfin for {user.name}: {e}", exc_info=True)

    async def on_progress(
        self,
        user: User,
        item: LibraryItem,
        position_ticks: int,
        is_paused: bool,
    ) -> None:
        """idle/playing -> playing; a missing session is created first"""
        try:
            session = await self.find(user) or await self._create(user)
            media_source_id = item.media_sources[0].id if item.media_sources else None
            await self.sessions.update_session(
                session,
                PlayState(
                    item_id=item.id,
                    position_ticks=position_ticks,
                    is_paused=is_paused,
                    media_source_id=media_source_id,
                ),
            )
            logger.info(
                f"Playback progress for {user.name}: {item.name} at "
                f"{ticks_to_seconds(position_ticks)}s (Paused: {is_paused})"
            )
        except Exception as e:
            logger.warning(f"Failed to update playback progress: {e}", exc_info=True)

    async def on_stop(self, user: User, item: LibraryItem, position_ticks: int) -> None:
        """playing -> idle; no-op without a session"""
        try:
            session = await self.find(user)
            if session is None:
                logger.debug(f"No {self.device_name} session for {user.name}, ignoring stop")
                return

            previous = session.play_state
            stopping = session.model_copy(update={
                "play_state": PlayState(
                    item_id=item.id,
                    position_ticks=position_ticks,
                    media_source_id=previous.media_source_id if previous else None,
                ),
            })
            await self.sessions.update_session(stopping, None)
            logger.info(
                f"Playback stopped for {user.name}: {item.name} at {ticks_to_seconds(position_ticks)}s"
            )
        except Exception as e:
            logger.warning(f"Failed to stop playback: {e}", exc_info=True)
