"""
Unit tests for the records backend client.

Usage:
    pytest tests/test_backend_client.py -v
"""
import httpx
import pytest

from visit_workflow.backend import BackendClient, format_backend_errors
from visit_workflow.errors import PatientNotFoundError, TransportError, WriteError
from visit_workflow.records import RecordKind

from conftest import BACKEND_URL, PATIENT_A


def client_for(handler) -> BackendClient:
    return BackendClient(base_url=BACKEND_URL, transport=httpx.MockTransport(handler))


class TestReads:
    """Test list reads and failure mapping."""

    @pytest.mark.asyncio
    async def test_list_records_uses_patient_filter_and_path(self, fake_backend, backend):
        fake_backend.add_assessment("overweight-assessments", PATIENT_A, "2024-01-10")

        records = await backend.list_records(RecordKind.OVERWEIGHT_ASSESSMENT, PATIENT_A)

        assert len(records) == 1
        request = fake_backend.requests[0]
        assert request.url.path == "/api/overweight-assessments/"
        assert request.url.params["patient"] == PATIENT_A

    @pytest.mark.asyncio
    async def test_falls_back_to_patient_id_filter(self):
        seen = []

        def handler(request):
            seen.append(dict(request.url.params))
            if "patient" in request.url.params:
                return httpx.Response(400, json={"patient": ["Unknown filter."]})
            return httpx.Response(200, json=[{"id": "v1", "visit_date": "2024-01-10"}])

        records = await client_for(handler).list_records(RecordKind.VITALS, PATIENT_A)

        assert records == [{"id": "v1", "visit_date": "2024-01-10"}]
        assert seen == [{"patient": PATIENT_A}, {"patient_id": PATIENT_A}]

    @pytest.mark.asyncio
    async def test_both_filters_failing_raises(self):
        def handler(request):
            return httpx.Response(500, json={"detail": "down"})

        with pytest.raises(TransportError) as exc:
            await client_for(handler).list_records(RecordKind.VITALS, PATIENT_A)
        assert exc.value.status_code == 500

    @pytest.mark.asyncio
    async def test_timeout_is_typed_and_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(TransportError) as exc:
            await client_for(handler).list_records(RecordKind.VITALS, PATIENT_A)

        assert exc.value.timeout
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(TransportError):
            await client_for(handler).list_patients()

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        def handler(request):
            return httpx.Response(200, text="<html>oops</html>")

        with pytest.raises(TransportError):
            await client_for(handler).list_patients()

    @pytest.mark.asyncio
    async def test_get_patient_not_found(self, backend):
        with pytest.raises(PatientNotFoundError) as exc:
            await backend.get_patient("nobody")
        assert exc.value.patient_id == "nobody"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("envelope", ["data", "results"])
    async def test_get_patient_unwraps_envelope(self, envelope):
        def handler(request):
            return httpx.Response(200, json={envelope: {"id": PATIENT_A, "first_name": "Ada"}})

        patient = await client_for(handler).get_patient(PATIENT_A)

        assert patient == {"id": PATIENT_A, "first_name": "Ada"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{"first_name": "Ada"}, {"data": {"first_name": "Ada"}}, [1, 2]])
    async def test_get_patient_without_id(self, payload):
        def handler(request):
            return httpx.Response(200, json=payload)

        with pytest.raises(TransportError):
            await client_for(handler).get_patient(PATIENT_A)

    @pytest.mark.asyncio
    async def test_list_patients_is_normalized(self, fake_backend, backend):
        fake_backend.envelope = "data"
        fake_backend.add_patient(PATIENT_A)

        patients = await backend.list_patients()

        assert [p["id"] for p in patients] == [PATIENT_A]


class TestWrites:
    """Test create calls and write error mapping."""

    @pytest.mark.asyncio
    async def test_create_record_posts_json(self, fake_backend, backend):
        created = await backend.create_record(RecordKind.VITALS, {"patient_id": PATIENT_A, "bmi": 24.3})

        assert created["bmi"] == 24.3
        assert "id" in created
        assert fake_backend.posts == [("vitals", {"patient_id": PATIENT_A, "bmi": 24.3})]

    @pytest.mark.asyncio
    async def test_field_errors_are_flattened(self, fake_backend, backend):
        fake_backend.reject_posts["vitals"] = (400, {"height_cm": ["Too large.", "Must be a number."]})

        with pytest.raises(WriteError) as exc:
            await backend.create_record(RecordKind.VITALS, {})

        assert exc.value.message == "height_cm: Too large., Must be a number."
        assert exc.value.status_code == 400
        assert not exc.value.retryable

    @pytest.mark.asyncio
    async def test_server_error_is_retryable(self, fake_backend, backend):
        fake_backend.reject_posts["general-assessments"] = (503, {"detail": "Service unavailable"})

        with pytest.raises(WriteError) as exc:
            await backend.create_record(RecordKind.GENERAL_ASSESSMENT, {})

        assert exc.value.message == "Service unavailable"
        assert exc.value.retryable

    @pytest.mark.asyncio
    async def test_write_timeout_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.WriteTimeout("timed out", request=request)

        with pytest.raises(WriteError) as exc:
            await client_for(handler).create_patient({"first_name": "A"})

        assert exc.value.retryable
        assert len(calls) == 1


class TestFormatBackendErrors:
    """Test error body flattening."""

    def test_detail(self):
        assert format_backend_errors({"detail": "Nope"}) == "Nope"

    def test_multiple_fields(self):
        body = {"visit_date": ["Required."], "bmi": "Invalid"}
        assert format_backend_errors(body) == "visit_date: Required.. bmi: Invalid"

    def test_plain_text(self):
        assert format_backend_errors("Bad Gateway") == "Bad Gateway"

    def test_unknown_shape(self):
        assert format_backend_errors(None) == ""
