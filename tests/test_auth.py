"""
Tests for authentication endpoints.
"""

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.core.constants import OutcomeKind
from app.core.exceptions import VerificationBackendFailure
from app.api.dependencies.auth import get_pin_hash_loader
from app.api.dependencies.database import get_db
from app.middleware.logging import REDACTED, redact_sensitive_data
from app.main import app


PIN = "135790"
WRONG_PIN = "000000"
DIGEST = "c2VjcmV0LWVucm9sbG1lbnQtZGlnZXN0"
OTHER_DIGEST = "b3RoZXItZW5yb2xsbWVudC1kaWdlc3Q="

API = "/api/v1/auth"


class FailingCommitSession:
    """AsyncSession wrapper yang commit-nya selalu gagal."""

    def __init__(self, session):
        self._session = session
        self.rolled_back = False

    def add(self, instance):
        self._session.add(instance)

    async def commit(self):
        raise SQLAlchemyError("audit database unavailable")

    async def rollback(self):
        self.rolled_back = True
        await self._session.rollback()


async def verify(client, pin):
    return await client.post(f"{API}/pin/verify", json={"pin": pin})


@pytest.mark.asyncio
@pytest.mark.integration
class TestPINVerification:
    """Test PIN verification endpoints."""

    async def test_verify_correct_pin(self, async_client):
        response = await verify(async_client, PIN)

        assert response.status_code == 200
        assert response.json() == {"kind": OutcomeKind.SUCCESS.value}
        assert "X-Request-ID" in response.headers

    async def test_verify_wrong_pin(self, async_client):
        response = await verify(async_client, WRONG_PIN)

        assert response.status_code == 200
        data = response.json()
        assert data["kind"] == "FAILURE"
        assert data["message"] == "PINEnter.IncorrectPINTries"
        assert data["attempts_remaining"] == 4
        assert data["lockout_warning"] is False

    async def test_lockout_flow(self, async_client):
        for _ in range(4):
            response = await verify(async_client, WRONG_PIN)
        assert response.json()["message"] == "PINEnter.LastTryBeforeTimeout"

        response = await verify(async_client, WRONG_PIN)
        data = response.json()
        assert data["kind"] == "LOCKED_OUT"
        assert "until" in data

        # Correct PIN is refused during the lockout
        response = await verify(async_client, PIN)
        assert response.json()["kind"] == "LOCKED_OUT"

        response = await async_client.get(f"{API}/status")
        assert response.status_code == 200
        status = response.json()
        assert status["status"] == "LOCKED"
        assert status["consecutive_failures"] == 5

    @pytest.mark.security
    @pytest.mark.parametrize("pin", ["12ab56", "123", "1234567890123", ""])
    async def test_malformed_pin_rejected_without_counting(self, async_client, pin):
        response = await verify(async_client, pin)

        assert response.status_code == 422
        assert response.json()["error"]["type"] == "InvalidCredentialFormatError"

        status = (await async_client.get(f"{API}/status")).json()
        assert status["consecutive_failures"] == 0

    async def test_schema_error_uses_error_envelope(self, async_client):
        long_pin = "9" * 65
        response = await async_client.post(f"{API}/pin/verify", json={"pin": long_pin})

        assert response.status_code == 422
        assert response.headers["Cache-Control"] == "no-store"
        error = response.json()["error"]
        assert error["type"] == "RequestValidationError"
        assert error["details"]["errors"][0]["loc"] == ["body", "pin"]
        assert long_pin not in response.text

        response = await async_client.post(f"{API}/pin/verify", json={})
        assert response.json()["error"]["type"] == "RequestValidationError"

    async def test_backend_failure_returns_503(self, async_client):
        async def broken_loader():
            raise VerificationBackendFailure("Stored PIN could not be read")

        app.dependency_overrides[get_pin_hash_loader] = lambda: broken_loader

        response = await verify(async_client, WRONG_PIN)

        assert response.status_code == 503
        error = response.json()["error"]
        assert error["type"] == "VerificationBackendFailure"
        assert error["details"]["message"] == "Error.Message1041"

        status = (await async_client.get(f"{API}/status")).json()
        assert status["consecutive_failures"] == 0

    async def test_confirm_pin_does_not_count(self, async_client):
        response = await async_client.post(f"{API}/pin/confirm", json={"pin": WRONG_PIN})

        assert response.status_code == 200
        assert response.json() == {"verified": False}

        status = (await async_client.get(f"{API}/status")).json()
        assert status["consecutive_failures"] == 0

    async def test_notify_and_entry(self, async_client):
        response = await async_client.post(f"{API}/lockout/notify")

        assert response.status_code == 200
        assert response.json()["status"] == "PENDING_NOTIFICATION"
        assert response.json()["notification_params"] == {"time": 5}

        response = await async_client.post(f"{API}/pin/entry")
        assert response.status_code == 200

    async def test_attempts_audit_trail(self, async_client):
        await verify(async_client, WRONG_PIN)
        await verify(async_client, PIN)

        response = await async_client.get(f"{API}/attempts", params={"limit": 10})

        assert response.status_code == 200
        attempts = response.json()
        assert len(attempts) == 2
        assert {a["outcome"] for a in attempts} == {"FAILURE", "SUCCESS"}
        assert all(a["method"] == "PIN" for a in attempts)
        assert sorted(a["consecutive_failures"] for a in attempts) == [0, 1]

    async def test_audit_failure_keeps_lockout_outcome(self, async_client, db_session):
        for _ in range(4):
            await verify(async_client, WRONG_PIN)

        failing_session = FailingCommitSession(db_session)

        async def use_failing_session():
            yield failing_session

        app.dependency_overrides[get_db] = use_failing_session

        response = await verify(async_client, WRONG_PIN)

        assert response.status_code == 200
        data = response.json()
        assert data["kind"] == "LOCKED_OUT"
        assert "until" in data
        assert failing_session.rolled_back is True

        status = (await async_client.get(f"{API}/status")).json()
        assert status["status"] == "LOCKED"
        assert status["consecutive_failures"] == 5


@pytest.mark.asyncio
@pytest.mark.integration
class TestBiometrics:
    """Test biometric endpoints."""

    async def test_verify_when_disabled(self, async_client):
        response = await async_client.post(
            f"{API}/biometrics/verify",
            json={"enrollment_digest": DIGEST}
        )

        assert response.status_code == 409
        assert response.json()["error"]["type"] == "BiometryDisabledError"

    async def test_enable_requires_correct_pin(self, async_client):
        response = await async_client.post(
            f"{API}/biometrics/enable",
            json={"pin": WRONG_PIN, "enrollment_digest": DIGEST}
        )

        assert response.status_code == 401

        status = (await async_client.get(f"{API}/status")).json()
        assert status["biometry_enabled"] is False
        assert status["consecutive_failures"] == 0

    async def test_enable_then_unlock(self, async_client):
        response = await async_client.post(
            f"{API}/biometrics/enable",
            json={"pin": PIN, "enrollment_digest": DIGEST}
        )
        assert response.status_code == 200
        assert response.json()["biometry_enabled"] is True

        response = await async_client.post(
            f"{API}/biometrics/verify",
            json={"enrollment_digest": DIGEST}
        )
        assert response.status_code == 200
        assert response.json()["kind"] == "SUCCESS"

    async def test_unknown_enrollment_refused(self, async_client):
        await async_client.post(
            f"{API}/biometrics/enable",
            json={"pin": PIN, "enrollment_digest": DIGEST}
        )
        await verify(async_client, WRONG_PIN)

        response = await async_client.post(
            f"{API}/biometrics/verify",
            json={"enrollment_digest": OTHER_DIGEST}
        )

        assert response.status_code == 401
        assert response.json()["error"]["details"]["message"] == "PINEnter.BiometricsError"

        status = (await async_client.get(f"{API}/status")).json()
        assert status["consecutive_failures"] == 1

    async def test_reconcile_revokes_on_changed_enrollment(self, async_client):
        await async_client.post(
            f"{API}/biometrics/enable",
            json={"pin": PIN, "enrollment_digest": DIGEST}
        )

        response = await async_client.post(
            f"{API}/biometrics/reconcile",
            json={"enrollment_digest": DIGEST}
        )
        assert response.json()["biometry_revoked"] is False

        response = await async_client.post(
            f"{API}/biometrics/reconcile",
            json={"enrollment_digest": OTHER_DIGEST}
        )
        assert response.status_code == 200
        assert response.json() == {
            "biometry_revoked": True,
            "message": "PINEnter.BiometricsChanged"
        }

        status = (await async_client.get(f"{API}/status")).json()
        assert status["biometry_enabled"] is False

    @pytest.mark.security
    @pytest.mark.parametrize("digest", [
        "not a digest with spaces!",
        "c2hvcnQ=",
        "A" * 129,
        DIGEST + "\n",
    ])
    async def test_malformed_digest_rejected(self, async_client, digest):
        response = await async_client.post(
            f"{API}/biometrics/reconcile",
            json={"enrollment_digest": digest}
        )

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["type"] == "InvalidCredentialFormatError"
        assert "enrollment_digest" in error["details"]

    async def test_enable_with_short_digest_uses_error_envelope(self, async_client):
        response = await async_client.post(
            f"{API}/biometrics/enable",
            json={"pin": PIN, "enrollment_digest": "c2hvcnQ="}
        )

        assert response.status_code == 422
        assert response.json()["error"]["type"] == "InvalidCredentialFormatError"

        status = (await async_client.get(f"{API}/status")).json()
        assert status["biometry_enabled"] is False


@pytest.mark.asyncio
@pytest.mark.integration
class TestHealth:
    """Test health endpoints."""

    async def test_health(self, async_client):
        response = await async_client.get("/api/v1/health/")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_ready(self, async_client):
        response = await async_client.get("/api/v1/health/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["checks"]["database"] is True
        assert data["checks"]["state_store"] is True


@pytest.mark.unit
class TestLogRedaction:
    """Test redaction sebelum request body di-log."""

    def test_pin_and_digest_redacted(self):
        body = {"pin": PIN, "enrollment_digest": DIGEST, "limit": 5}

        redacted = redact_sensitive_data(body)

        assert redacted == {"pin": REDACTED, "enrollment_digest": REDACTED, "limit": 5}

    def test_nested_keys_matched_by_substring(self):
        body = {"items": [{"new_PIN": PIN}], "meta": {"Authorization": "Bearer x"}}

        redacted = redact_sensitive_data(body)

        assert redacted["items"][0]["new_PIN"] == REDACTED
        assert redacted["meta"]["Authorization"] == REDACTED


@pytest.mark.unit
class TestOpenAPIErrors:
    """Test dokumentasi error envelope di OpenAPI schema."""

    def test_auth_routes_document_error_envelope(self):
        schema = app.openapi()

        assert "ErrorResponse" in schema["components"]["schemas"]
        responses = schema["paths"]["/api/v1/auth/pin/confirm"]["post"]["responses"]
        for code in ("401", "409", "422", "423", "503"):
            assert responses[code]["content"]["application/json"]["schema"] == {
                "$ref": "#/components/schemas/ErrorResponse"
            }
