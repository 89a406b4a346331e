"""
Test configuration and fixtures
"""
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest

from app.models.config import UserConfig
from app.models.jellyfin import (
    ItemQuery,
    Library,
    LibraryItem,
    MediaSource,
    MediaStream,
    PlayState,
    Session,
    User,
)
from app.services.jellyfin import JellyfinError

BASE_URL = "http://jellyfin.test"

USER_ID = uuid.UUID(int=1).hex
MOVIES_LIBRARY = uuid.UUID(int=10).hex
SHOWS_LIBRARY = uuid.UUID(int=11).hex
MUSIC_LIBRARY = uuid.UUID(int=12).hex

FIGHT_CLUB = uuid.UUID(int=100).hex
FIGHT_CLUB_4K = uuid.UUID(int=101).hex
INCEPTION = uuid.UUID(int=102).hex
BREAKING_BAD = uuid.UUID(int=200).hex
PILOT = uuid.UUID(int=201).hex
CATS_IN_THE_BAG = uuid.UUID(int=202).hex
SEVEN_THIRTY_SEVEN = uuid.UUID(int=203).hex


def _date(year: int, month: int = 1, day: int = 1) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


class FakeJellyfin:
    """In-memory Jellyfin implementing the host interfaces"""

    def __init__(
        self,
        user: User,
        libraries: List[Library],
        items: List[LibraryItem],
        parents: Dict[str, str],
    ):
        self.user = user
        self.libraries = libraries
        self.items = {item.id: item for item in items}
        self.parents = parents
        self.sessions: List[Session] = []
        self.updates: List[tuple] = []
        self.queries: List[ItemQuery] = []
        self.fail_sessions = False
        self.closed = False

    async def get_current_user(self) -> Optional[User]:
        return self.user

    async def get_user_libraries(self, user: User) -> List[Library]:
        return list(self.libraries)

    async def get_item(self, user: User, item_id: str) -> Optional[LibraryItem]:
        return self.items.get(item_id)

    async def get_items(self, user: User, query: ItemQuery) -> List[LibraryItem]:
        self.queries.append(query)
        results = []
        for item in self.items.values():
            if query.include_item_types and item.type not in query.include_item_types:
                continue
            if query.parent_id and self.parents.get(item.id) != query.parent_id:
                continue
            if query.ancestor_ids and item.series_id not in query.ancestor_ids:
                continue
            if query.provider_ids and item.imdb_id != query.provider_ids.get("Imdb"):
                continue
            if query.parent_index_number is not None and item.parent_index_number != query.parent_index_number:
                continue
            if query.index_number is not None and item.index_number != query.index_number:
                continue
            if query.search_term and query.search_term.lower() not in item.name.lower():
                continue
            results.append(item)

        if query.sort_by:
            results.sort(key=lambda i: i.name)
            results.sort(key=lambda i: i.premiere_date.year if i.premiere_date else 0, reverse=True)

        end = query.start_index + query.limit if query.limit is not None else None
        return results[query.start_index:end]

    async def get_episodes(self, user: User, series_id: str) -> List[LibraryItem]:
        episodes = [i for i in self.items.values() if i.series_id == series_id]
        return sorted(episodes, key=lambda e: (e.parent_index_number, e.index_number))

    async def list_sessions(self, user: User) -> List[Session]:
        if self.fail_sessions:
            raise JellyfinError("session list unavailable")
        return [s for s in self.sessions if s.user_id == user.id]

    async def create_session(self, user: User, device_name: str) -> Session:
        session = Session(
            id=uuid.uuid4().hex,
            user_id=user.id,
            device_id=uuid.uuid4().hex,
            device_name=device_name,
            last_activity_date=datetime.now(timezone.utc),
        )
        self.sessions.append(session)
        return session

    async def update_session(self, session: Session, play_state: Optional[PlayState]) -> None:
        self.updates.append((session, play_state))
        self.sessions = [
            s.model_copy(update={
                "play_state": play_state,
                "last_activity_date": datetime.now(timezone.utc),
            }) if s.id == session.id else s
            for s in self.sessions
        ]

    async def close(self) -> None:
        self.closed = True


def video(width, height, codec="h264", color_transfer=None, color_space=None) -> MediaStream:
    return MediaStream(
        type="Video",
        codec=codec,
        width=width,
        height=height,
        color_transfer=color_transfer,
        color_space=color_space,
    )


def audio(language=None, codec="ac3") -> MediaStream:
    return MediaStream(type="Audio", codec=codec, language=language)


@pytest.fixture
def user():
    return User(id=USER_ID, name="alice")


@pytest.fixture
def libraries():
    return [
        Library(id=MOVIES_LIBRARY, name="Movies", collection_type="movies"),
        Library(id=SHOWS_LIBRARY, name="Shows", collection_type="tvshows"),
        Library(id=MUSIC_LIBRARY, name="Music", collection_type="music"),
    ]


@pytest.fixture
def fight_club():
    return LibraryItem(
        id=FIGHT_CLUB,
        name="Fight Club",
        type="Movie",
        overview="A ticking-time-bomb insomniac...",
        premiere_date=_date(1999, 10, 15),
        provider_ids={"Imdb": "tt0137523", "Tmdb": "550"},
        genres=["Drama"],
        community_rating=8.44,
        run_time_ticks=139 * 60 * 10_000_000,
        image_tags={"Primary": "abc", "Logo": "def"},
        backdrop_image_tags=["ghi"],
        media_sources=[
            MediaSource(
                id=FIGHT_CLUB,
                name="Fight Club",
                size=int(4.5 * 1024 ** 3),
                media_streams=[
                    video(1920, 1080, codec="h264"),
                    audio("eng", "ac3"),
                    audio("ger", "dts"),
                    audio("eng", "ac3"),
                ],
            )
        ],
    )


@pytest.fixture
def fight_club_4k():
    return LibraryItem(
        id=FIGHT_CLUB_4K,
        name="Fight Club",
        type="Movie",
        premiere_date=_date(1999, 10, 15),
        provider_ids={"Imdb": "tt0137523"},
        media_sources=[
            MediaSource(
                id=FIGHT_CLUB_4K,
                name="Fight Club - 2160p",
                size=60 * 1024 ** 3,
                media_streams=[video(3840, 2160, codec="hevc", color_transfer="smpte2084", color_space="bt2020nc")],
            )
        ],
    )


@pytest.fixture
def inception():
    return LibraryItem(
        id=INCEPTION,
        name="Inception",
        type="Movie",
        premiere_date=_date(2010, 7, 16),
        provider_ids={"Imdb": "tt1375666"},
        media_sources=[MediaSource(id=INCEPTION)],
    )


@pytest.fixture
def breaking_bad():
    return LibraryItem(
        id=BREAKING_BAD,
        name="Breaking Bad",
        type="Series",
        status="Ended",
        premiere_date=_date(2008, 1, 20),
        end_date=_date(2013, 9, 29),
        provider_ids={"Imdb": "tt0903747"},
        genres=["Crime", "Drama"],
        is_folder=True,
    )


@pytest.fixture
def episodes():
    def episode(item_id, name, season, number):
        return LibraryItem(
            id=item_id,
            name=name,
            type="Episode",
            series_id=BREAKING_BAD,
            parent_index_number=season,
            index_number=number,
            premiere_date=_date(2008, 1, 20 + number),
            media_sources=[MediaSource(id=item_id, media_streams=[video(1280, 720)])],
        )

    return [
        episode(PILOT, "Pilot", 1, 1),
        episode(CATS_IN_THE_BAG, "Cat's in the Bag...", 1, 2),
        episode(SEVEN_THIRTY_SEVEN, "Seven Thirty-Seven", 2, 1),
    ]


@pytest.fixture
def fake_host(user, libraries, fight_club, fight_club_4k, inception, breaking_bad, episodes):
    """Fake Jellyfin with a movie library, a show library and a music library"""
    folders = [
        LibraryItem(id=MOVIES_LIBRARY, name="Movies", type="CollectionFolder", is_folder=True),
        LibraryItem(id=SHOWS_LIBRARY, name="Shows", type="CollectionFolder", is_folder=True),
    ]
    items = folders + [fight_club, fight_club_4k, inception, breaking_bad] + episodes
    parents = {
        FIGHT_CLUB: MOVIES_LIBRARY,
        FIGHT_CLUB_4K: MOVIES_LIBRARY,
        INCEPTION: MOVIES_LIBRARY,
        BREAKING_BAD: SHOWS_LIBRARY,
    }
    parents.update({e.id: BREAKING_BAD for e in episodes})
    return FakeJellyfin(user, libraries, items, parents)


@pytest.fixture
def sample_user_config():
    """Sample user configuration exposing the movie and show libraries"""
    return UserConfig(
        auth_token="4b1f0c9e8d7a4e6b9c2d1f0e3a5b7c9d",  # Fake 32-char hex
        libraries=[uuid.UUID(MOVIES_LIBRARY), uuid.UUID(SHOWS_LIBRARY)],
        server_name="Home",
    )
