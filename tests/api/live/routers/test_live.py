"""Unit tests for /live router endpoints."""

import jwt
import pytest
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient

from app.api.live.dependency import User, get_current_user, get_platform
from app.api.live.errors import app_error_handler
from app.api.live.routers.live import get_broadcast_service, router
from app.app_config import get_app_environ_config
from app.domain.live.broadcast._registry import CoordinatorRegistry
from app.domain.live.broadcast.broadcast_domain import BroadcastService
from app.services.integrations.youtube.youtube_errors import PlatformErrorKind
from app.shared.api.utils import validation_exception_handler
from app.utils.app_errors import AppError
from tests.fakes import FakeLivePlatform, inactive_error, platform_error


@pytest.fixture
def mock_user() -> User:
    """Create a mock authenticated user."""
    return User(user_id="test_user_123")


@pytest.fixture
def fake_platform() -> FakeLivePlatform:
    fake = FakeLivePlatform()
    fake.add_broadcast()
    return fake


@pytest.fixture
def service(clock, schedule) -> BroadcastService:
    return BroadcastService(CoordinatorRegistry(schedule, clock=clock, sleep=clock.sleep))


@pytest.fixture
def test_app(mock_user: User, fake_platform: FakeLivePlatform, service: BroadcastService) -> FastAPI:
    """Create FastAPI test app with dependency overrides."""
    app = FastAPI()

    app.dependency_overrides[get_current_user] = lambda: mock_user
    app.dependency_overrides[get_platform] = lambda: fake_platform
    app.dependency_overrides[get_broadcast_service] = lambda: service

    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]

    app.include_router(router)
    return app


@pytest.fixture
def client(test_app: FastAPI) -> TestClient:
    """Create test client."""
    return TestClient(test_app)


class TestCreateLive:
    """Tests for POST /live/create endpoint."""

    def test_create_returns_ingest_coordinates(self, client: TestClient):
        """Should return ingest URL, stream key and ids in camelCase."""
        # Arrange
        payload = {"title": "My stream", "privacy": "unlisted"}

        # Act
        response = client.post("/live/create", json=payload)

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["ingestUrl"] == "rtmp://a.rtmp.youtube.com/live2"
        assert data["streamKey"].startswith("key-")
        assert data["broadcastId"].startswith("bc_")
        assert data["autoLiveEnabled"] == get_app_environ_config().AUTO_LIVE_ENABLED

    def test_create_without_body(self, client: TestClient):
        """Should use configured defaults when no body is sent."""
        response = client.post("/live/create")

        assert response.status_code == 200

    def test_create_invalid_privacy(self, client: TestClient):
        """Should reject unknown privacy values."""
        response = client.post("/live/create", json={"privacy": "friends"})

        assert response.status_code == 422
        assert response.json()["errcode"] == "E_INVALID_PARAMS"

    def test_create_auth_failure_maps_to_401(
        self, client: TestClient, fake_platform: FakeLivePlatform
    ):
        """Should surface a platform auth failure as 401 with an error envelope."""
        fake_platform.errors["insert_broadcast"] = [platform_error(PlatformErrorKind.AUTH)]

        response = client.post("/live/create", json={})

        assert response.status_code == 401
        data = response.json()
        assert data["success"] is False
        assert data["errcode"] == "E_PLATFORM_AUTH"
        assert data["erresid"]


class TestCheckAndGoLive:
    """Tests for POST /live/check-and-go-live endpoint."""

    def test_goes_live(self, client: TestClient):
        """Should report success with status live."""
        response = client.post("/live/check-and-go-live", json={"broadcastId": "bc_1"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["status"] == "live"
        assert data["canRetry"] is False
        assert data["outcome"] == "live"

    def test_partially_live_can_retry(self, client: TestClient, fake_platform: FakeLivePlatform):
        """Should report canRetry with the current lifecycle when ingest never starts."""
        fake_platform.errors["transition_broadcast"] = [inactive_error()] * 3

        response = client.post("/live/check-and-go-live", json={"broadcastId": "bc_1"})

        data = response.json()
        assert data["success"] is False
        assert data["status"] == "ready"
        assert data["canRetry"] is True
        assert data["outcome"] == "partially_live"
        assert data["attempts"] == 3

    def test_budget_returns_pending(self, client: TestClient, fake_platform: FakeLivePlatform):
        """Should answer pending instead of waiting past the budget."""
        fake_platform.errors["transition_broadcast"] = [inactive_error()] * 3

        response = client.post(
            "/live/check-and-go-live", json={"broadcastId": "bc_1", "budgetSeconds": 3}
        )

        data = response.json()
        assert data["outcome"] == "pending"
        assert data["canRetry"] is True
        assert data["attempts"] == 1

    def test_auth_failure_cannot_retry(self, client: TestClient, fake_platform: FakeLivePlatform):
        """Should report a non-retryable failure in the body."""
        fake_platform.errors["transition_broadcast"] = [platform_error(PlatformErrorKind.AUTH)]

        response = client.post("/live/check-and-go-live", json={"broadcastId": "bc_1"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is False
        assert data["canRetry"] is False
        assert data["outcome"] == "failed"

    def test_missing_broadcast_id(self, client: TestClient):
        """Should reject a body without broadcastId."""
        response = client.post("/live/check-and-go-live", json={})

        assert response.status_code == 422


class TestStatus:
    """Tests for GET /live/status/{broadcast_id} endpoint."""

    def test_status_fields(self, client: TestClient):
        """Should return lifecycle and ingest health."""
        response = client.get("/live/status/bc_1")

        assert response.status_code == 200
        data = response.json()
        assert data["lifecycleStatus"] == "ready"
        assert data["streamStatus"] == "inactive"
        assert data["ingestActive"] is False
        assert data["canTransitionToLive"] is False

    def test_status_not_found(self, client: TestClient):
        """Should answer 404 for an unknown broadcast."""
        response = client.get("/live/status/bc_missing")

        assert response.status_code == 404
        assert response.json()["errcode"] == "E_BROADCAST_NOT_FOUND"


class TestEndLive:
    """Tests for POST /live/end endpoint."""

    def test_end_succeeds_even_when_platform_fails(
        self, client: TestClient, fake_platform: FakeLivePlatform
    ):
        """Should answer success when the remote end call fails."""
        fake_platform.set_lifecycle("bc_1", "live")
        fake_platform.errors["transition_broadcast"] = [platform_error(PlatformErrorKind.TRANSIENT)]

        response = client.post("/live/end", json={"broadcastId": "bc_1"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["remoteEnded"] is False


class TestTransition:
    """Tests for POST /live/transition endpoint."""

    def test_live_without_ingest(self, client: TestClient, fake_platform: FakeLivePlatform):
        """Should answer 400 E_STREAM_INACTIVE."""
        fake_platform.errors["transition_broadcast"] = [inactive_error()] * 3

        response = client.post(
            "/live/transition", json={"broadcastId": "bc_1", "broadcastStatus": "live"}
        )

        assert response.status_code == 400
        assert response.json()["errcode"] == "E_STREAM_INACTIVE"

    def test_complete(self, client: TestClient, fake_platform: FakeLivePlatform):
        """Should complete a live broadcast."""
        fake_platform.set_lifecycle("bc_1", "live")

        response = client.post(
            "/live/transition", json={"broadcastId": "bc_1", "broadcastStatus": "complete"}
        )

        assert response.status_code == 200
        assert fake_platform.lifecycle("bc_1") == "complete"


class TestAuth:
    """Tests for the bearer-token dependency."""

    @pytest.fixture
    def auth_client(self, fake_platform: FakeLivePlatform, service: BroadcastService) -> TestClient:
        app = FastAPI()
        app.dependency_overrides[get_platform] = lambda: fake_platform
        app.dependency_overrides[get_broadcast_service] = lambda: service
        app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
        app.include_router(router)
        return TestClient(app)

    def test_missing_token(self, auth_client: TestClient):
        """Should answer 401 without a bearer token."""
        response = auth_client.get("/live/status/bc_1")

        assert response.status_code == 401
        assert response.json()["errcode"] == "E_BAD_TOKEN"

    def test_valid_token(self, auth_client: TestClient):
        """Should accept an HS256 token carrying a username."""
        token = jwt.encode(
            {"username": "alice"}, get_app_environ_config().JWT_SECRET, algorithm="HS256"
        )

        response = auth_client.get(
            "/live/status/bc_1", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 200

    def test_token_with_wrong_secret(self, auth_client: TestClient):
        """Should reject a token signed with another secret."""
        if not get_app_environ_config().JWT_VERIFY:
            pytest.skip("signature verification disabled")
        token = jwt.encode({"username": "alice"}, "not-the-secret", algorithm="HS256")

        response = auth_client.get(
            "/live/status/bc_1", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401
