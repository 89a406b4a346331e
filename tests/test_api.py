"""
Tests for API endpoints
"""
import uuid

import pytest
from httpx import ASGITransport, AsyncClient

from app.api.deps import get_host_factory
from app.core.app import create_app
from app.core.config import settings
from app.models.config import UserConfig
from app.services.jellyfin import JellyfinError
from app.utils.token import decode_config, encode_config, resolve_access_token
from tests.conftest import (
    BREAKING_BAD,
    FIGHT_CLUB,
    FIGHT_CLUB_4K,
    INCEPTION,
    MOVIES_LIBRARY,
    SHOWS_LIBRARY,
)


def client_for(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.fixture
def app(fake_host):
    app = create_app()
    app.dependency_overrides[get_host_factory] = lambda: (lambda access_token: fake_host)
    return app


@pytest.fixture
def token(sample_user_config):
    return encode_config(sample_user_config)


@pytest.mark.asyncio
async def test_health_check(app):
    """Test health check endpoint"""
    async with client_for(app) as client:
        response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["version"] == settings.APP_VERSION


@pytest.mark.asyncio
async def test_configure_page(app):
    """Test configuration page is accessible"""
    async with client_for(app) as client:
        response = await client.get("/configure")

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert settings.APP_NAME in response.text
    assert "__APP_NAME__" not in response.text
    assert r"replace(/^https?:\/\//, 'stremio://')" in response.text


@pytest.mark.asyncio
async def test_generate_token_encrypts_access_token(app):
    """Test token generation stores the access token encrypted by default"""
    request = {
        "auth_token": "jellyfin-access-token",
        "libraries": [MOVIES_LIBRARY],
        "server_name": "Home",
    }

    async with client_for(app) as client:
        response = await client.post("/generate-token", json=request)

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["install_url"].endswith(f"/{data['token']}/manifest.json")

    decoded = decode_config(data["token"])
    assert decoded is not None
    assert decoded.auth_token is None
    assert decoded.auth_token_enc
    assert resolve_access_token(decoded) == "jellyfin-access-token"
    assert decoded.libraries == [uuid.UUID(MOVIES_LIBRARY)]
    assert decoded.server_name == "Home"


@pytest.mark.asyncio
async def test_generate_token_plain(app):
    """Test token generation without encryption"""
    request = {
        "auth_token": "jellyfin-access-token",
        "libraries": [MOVIES_LIBRARY],
        "encrypt_token": False,
    }

    async with client_for(app) as client:
        response = await client.post("/generate-token", json=request)

    assert response.status_code == 200
    decoded = decode_config(response.json()["token"])
    assert decoded.auth_token == "jellyfin-access-token"
    assert decoded.server_name == "Jellyfin"


@pytest.mark.asyncio
async def test_generate_token_without_libraries(app):
    """Test token generation requires at least one library"""
    request = {"auth_token": "jellyfin-access-token", "libraries": []}

    async with client_for(app) as client:
        response = await client.post("/generate-token", json=request)

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_generate_token_missing_fields(app):
    """Test token generation endpoint with missing required fields"""
    async with client_for(app) as client:
        response = await client.post("/generate-token", json={"libraries": [MOVIES_LIBRARY]})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_invalid_token(app):
    """Test that an invalid token is rejected"""
    async with client_for(app) as client:
        response = await client.get("/invalid_token/manifest.json")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_rejected_access_token(app, fake_host, token):
    """Test that a token Jellyfin does not accept is rejected"""
    fake_host.user = None

    async with client_for(app) as client:
        response = await client.get(f"/{token}/manifest.json")

    assert response.status_code == 401
    assert fake_host.closed


@pytest.mark.asyncio
async def test_manifest(app, fake_host, token):
    """Test manifest lists one catalog per configured library"""
    async with client_for(app) as client:
        response = await client.get(f"/{token}/manifest.json")

    assert response.status_code == 200
    assert "no-cache" in response.headers["cache-control"]

    data = response.json()
    assert data["id"] == "com.stremio.jellio"
    assert data["version"] == settings.APP_VERSION
    assert data["idPrefixes"] == ["tt", settings.ID_PREFIX]
    assert data["behaviorHints"]["configurable"] is True
    assert data["description"] == "Play movies and series from Home: Movies, Shows"

    catalogs = [(c["type"], c["id"], c["name"]) for c in data["catalogs"]]
    assert catalogs == [
        ("movie", MOVIES_LIBRARY, "Movies | Home"),
        ("series", SHOWS_LIBRARY, "Shows | Home"),
    ]
    assert fake_host.closed


@pytest.mark.asyncio
async def test_manifest_unknown_library(app):
    """Test manifest fails when a configured library is not visible"""
    config = UserConfig(
        auth_token="jellyfin-access-token",
        libraries=[uuid.UUID(MOVIES_LIBRARY), uuid.uuid4()],
    )

    async with client_for(app) as client:
        response = await client.get(f"/{encode_config(config)}/manifest.json")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_catalog(app, token):
    """Test catalog returns library items newest first"""
    async with client_for(app) as client:
        response = await client.get(f"/{token}/catalog/movie/{MOVIES_LIBRARY}.json")

    assert response.status_code == 200
    metas = response.json()["metas"]
    assert [m["name"] for m in metas] == ["Inception", "Fight Club", "Fight Club"]
    assert metas[0]["id"] == "tt1375666"
    assert metas[0]["type"] == "movie"
    assert metas[0]["poster"] == f"{settings.public_url}/Items/{INCEPTION}/Images/Primary"


@pytest.mark.asyncio
async def test_catalog_with_extra(app, token):
    """Test catalog search and skip extras"""
    async with client_for(app) as client:
        searched = await client.get(f"/{token}/catalog/movie/{MOVIES_LIBRARY}/search=incep.json")
        skipped = await client.get(f"/{token}/catalog/movie/{MOVIES_LIBRARY}/skip=1.json")

    assert [m["name"] for m in searched.json()["metas"]] == ["Inception"]
    assert [m["name"] for m in skipped.json()["metas"]] == ["Fight Club", "Fight Club"]


@pytest.mark.asyncio
async def test_catalog_skip_past_end(app, token):
    """Test paging past the last item returns an empty catalog"""
    async with client_for(app) as client:
        response = await client.get(f"/{token}/catalog/movie/{MOVIES_LIBRARY}/skip=500.json")

    assert response.status_code == 200
    assert response.json() == {"metas": []}


@pytest.mark.asyncio
async def test_catalog_errors(app, token):
    """Test catalog rejects unknown types and libraries"""
    async with client_for(app) as client:
        bad_type = await client.get(f"/{token}/catalog/channel/{MOVIES_LIBRARY}.json")
        unknown = await client.get(f"/{token}/catalog/movie/{uuid.uuid4().hex}.json")

    assert bad_type.status_code == 400
    assert unknown.status_code == 404


@pytest.mark.asyncio
async def test_meta_series(app, token):
    """Test series meta includes episodes"""
    async with client_for(app) as client:
        response = await client.get(f"/{token}/meta/series/{settings.ID_PREFIX}:{BREAKING_BAD}.json")

    assert response.status_code == 200
    meta = response.json()["meta"]
    assert meta["name"] == "Breaking Bad"
    assert meta["releaseInfo"] == "2008-2013"
    assert [(v["season"], v["episode"]) for v in meta["videos"]] == [(1, 1), (1, 2), (2, 1)]
    assert all(v["id"].startswith(f"{settings.ID_PREFIX}:") for v in meta["videos"])


@pytest.mark.asyncio
async def test_meta_errors(app, token):
    """Test meta status codes for malformed ids and mismatched types"""
    async with client_for(app) as client:
        bad_prefix = await client.get(f"/{token}/meta/movie/other:{FIGHT_CLUB}.json")
        unknown = await client.get(f"/{token}/meta/movie/{settings.ID_PREFIX}:{uuid.uuid4()}.json")
        not_series = await client.get(f"/{token}/meta/series/{settings.ID_PREFIX}:{FIGHT_CLUB}.json")

    assert bad_prefix.status_code == 404
    assert unknown.status_code == 404
    assert not_series.status_code == 400


@pytest.mark.asyncio
async def test_movie_streams(app, fake_host, token):
    """Test movie streams resolve every copy with the IMDb id"""
    async with client_for(app) as client:
        response = await client.get(f"/{token}/stream/movie/tt0137523.json")

    assert response.status_code == 200
    streams = response.json()["streams"]
    assert [s["name"] for s in streams] == [
        "Fight Club (1999)\n1080p | H264",
        "Fight Club (1999)\n4K | HDR | DV | HEVC",
    ]
    assert streams[1]["url"] == (
        f"{settings.public_url}/videos/{FIGHT_CLUB_4K}/stream"
        f"?mediaSourceId={FIGHT_CLUB_4K}&static=true"
    )
    assert len(fake_host.sessions) == 1


@pytest.mark.asyncio
async def test_episode_streams(app, token):
    """Test episode streams resolve by series IMDb id, season and episode"""
    async with client_for(app) as client:
        response = await client.get(f"/{token}/stream/series/tt0903747:1:2.json")

    assert response.status_code == 200
    streams = response.json()["streams"]
    assert len(streams) == 1
    assert streams[0]["name"] == "Cat's in the Bag... (2008)\n720p | H264"


@pytest.mark.asyncio
async def test_stream_by_prefixed_id(app, token):
    """Test streams resolve for a prefixed Jellyfin id"""
    async with client_for(app) as client:
        response = await client.get(f"/{token}/stream/movie/{settings.ID_PREFIX}:{FIGHT_CLUB}.json")

    assert response.status_code == 200
    assert len(response.json()["streams"]) == 1


@pytest.mark.asyncio
async def test_stream_not_found(app, token):
    """Test unknown and mismatched stream ids"""
    async with client_for(app) as client:
        wrong_type = await client.get(f"/{token}/stream/series/tt0137523.json")
        unknown_series = await client.get(f"/{token}/stream/series/tt0000001:1:1.json")
        garbage = await client.get(f"/{token}/stream/movie/kitsu:1.json")
        unknown_movie = await client.get(f"/{token}/stream/movie/tt0000001.json")

    assert wrong_type.status_code == 404
    assert unknown_series.status_code == 404
    assert garbage.status_code == 404
    assert unknown_movie.status_code == 200
    assert unknown_movie.json() == {"streams": []}


@pytest.mark.asyncio
async def test_playback_progress_and_stop(app, fake_host, token):
    """Test playback reports drive the shadow session"""
    item_id = f"{settings.ID_PREFIX}:{FIGHT_CLUB}"

    async with client_for(app) as client:
        progress = await client.post(
            f"/{token}/playback/progress",
            json={"itemId": item_id, "positionTicks": 600_000_000, "isPaused": True},
        )
        assert progress.status_code == 200

        session = fake_host.sessions[0]
        assert session.play_state.item_id == FIGHT_CLUB
        assert session.play_state.position_ticks == 600_000_000
        assert session.play_state.is_paused is True

        stop = await client.post(
            f"/{token}/playback/stop",
            json={"itemId": item_id, "positionTicks": 700_000_000},
        )

    assert stop.status_code == 200
    assert fake_host.sessions[0].play_state is None
    stopped, play_state = fake_host.updates[-1]
    assert play_state is None
    assert stopped.play_state.position_ticks == 700_000_000


@pytest.mark.asyncio
async def test_playback_errors(app, token):
    """Test playback reports return error bodies"""
    async with client_for(app) as client:
        malformed = await client.post(
            f"/{token}/playback/progress",
            json={"itemId": FIGHT_CLUB, "positionTicks": 0},
        )
        bad_guid = await client.post(
            f"/{token}/playback/stop",
            json={"itemId": f"{settings.ID_PREFIX}:not-a-guid", "positionTicks": 0},
        )
        unknown = await client.post(
            f"/{token}/playback/progress",
            json={"itemId": f"{settings.ID_PREFIX}:{uuid.uuid4()}", "positionTicks": 0},
        )

    assert malformed.status_code == 400
    assert malformed.json() == {"error": f"Invalid itemId format. Expected '{settings.ID_PREFIX}:guid'"}
    assert bad_guid.status_code == 400
    assert bad_guid.json() == {"error": "Invalid GUID format in itemId"}
    assert unknown.status_code == 404
    assert "error" in unknown.json()


@pytest.mark.asyncio
async def test_playback_malformed_body(app, token):
    """Test playback reports with invalid bodies answer 400 with an error body"""
    async with client_for(app) as client:
        wrong_types = await client.post(f"/{token}/playback/progress", json={"itemId": 123})
        empty = await client.post(f"/{token}/playback/stop", json={})

    assert wrong_types.status_code == 400
    error = wrong_types.json()["error"]
    assert error.startswith("Invalid request body")
    assert "itemId" in error
    assert "positionTicks" in error
    assert empty.status_code == 400
    assert set(empty.json()) == {"error"}


@pytest.mark.asyncio
async def test_jellyfin_failure(app, fake_host, token):
    """Test Jellyfin failures surface as bad gateway"""
    async def unavailable(user):
        raise JellyfinError("Jellyfin returned 500 for /UserViews", 500)

    fake_host.get_user_libraries = unavailable

    async with client_for(app) as client:
        response = await client.get(f"/{token}/manifest.json")

    assert response.status_code == 502
    assert response.json() == {"error": "Jellyfin returned 500 for /UserViews"}
    assert fake_host.closed
