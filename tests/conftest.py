"""
Pytest fixtures for Clinical Visit tests.

The records backend is simulated in memory and served to the real
BackendClient through httpx.MockTransport, so every test exercises the
same HTTP, envelope and error handling paths as production.
"""
import asyncio
import json
import sys
import uuid
import pytest
from pathlib import Path
from datetime import date
from typing import Optional

import httpx
from dotenv import load_dotenv

# Ensure src/ is on sys.path so tests can import visit_workflow.
ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from visit_workflow.backend import BackendClient

# Load environment variables
load_dotenv()


BACKEND_URL = "http://records.test/api"
TODAY = date(2024, 3, 1)

PATIENT_A = "a0000000-0000-4000-8000-00000000000a"
PATIENT_B = "b0000000-0000-4000-8000-00000000000b"
PATIENT_C = "c0000000-0000-4000-8000-00000000000c"

RESOURCES = ("vitals", "general-assessments", "overweight-assessments")


# ============================================================================
# In-memory records backend
# ============================================================================


class FakeRecordsBackend:
    """
    In-memory stand-in for the clinical records backend.

    Attributes:
        envelope: How list responses are wrapped: "list", "results", "data"
            or "nested" ({"payload": {"items": [...]}})
        failing: (resource, patient_id) pairs whose list reads return 500;
            patient_id "*" fails the resource for everyone
        timeouts: (resource, patient_id) pairs whose list reads time out
        delays: patient_id -> seconds to wait before answering list reads
        reject_posts: resource -> (status, body) returned for every POST
        detail_envelope: Key that wraps single-patient responses, if any
    """

    def __init__(self, envelope: str = "results"):
        self.envelope = envelope
        self.patients: list[dict] = []
        self.records: dict[str, list[dict]] = {name: [] for name in RESOURCES}
        self.failing: set[tuple[str, str]] = set()
        self.timeouts: set[tuple[str, str]] = set()
        self.delays: dict[str, float] = {}
        self.reject_posts: dict[str, tuple[int, object]] = {}
        self.patients_down = False
        self.detail_envelope: Optional[str] = None
        self.requests: list[httpx.Request] = []
        self.posts: list[tuple[str, dict]] = []

    # Seeding helpers

    def add_patient(self, patient_id: str, **fields) -> dict:
        patient = {
            "id": patient_id,
            "patient_id": fields.pop("patient_number", f"P-{patient_id[:4].upper()}"),
            "first_name": "Test",
            "last_name": "Patient",
            "date_of_birth": "1980-05-17",
            "gender": "F",
            "registration_date": "2024-01-02",
        }
        patient.update(fields)
        self.patients.append(patient)
        return patient

    def add_vitals(self, patient_id: str, visit_date: str, height_cm, weight_kg, bmi=None, **extra) -> dict:
        record = {
            "id": str(uuid.uuid4()),
            "patient_id": patient_id,
            "visit_date": visit_date,
            "height_cm": height_cm,
            "weight_kg": weight_kg,
            "bmi": bmi,
            **extra,
        }
        self.records["vitals"].append(record)
        return record

    def add_assessment(self, resource: str, patient_id: str, visit_date: str, **fields) -> dict:
        record = {
            "id": str(uuid.uuid4()),
            "patient_id": patient_id,
            "visit_date": visit_date,
            "general_health": "Good",
            "comments": "",
            **fields,
        }
        self.records[resource].append(record)
        return record

    # HTTP handling

    def _wrap(self, records: list) -> object:
        if self.envelope == "list":
            return records
        if self.envelope == "nested":
            return {"payload": {"count": len(records), "items": records}}
        return {"count": len(records), self.envelope: records}

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        parts = [p for p in request.url.path.split("/") if p]
        resource = parts[1]

        if request.method == "POST":
            body = json.loads(request.content)
            self.posts.append((resource, body))
            if resource in self.reject_posts:
                status, payload = self.reject_posts[resource]
                return httpx.Response(status, json=payload)
            created = {"id": str(uuid.uuid4()), **body}
            if resource == "patients":
                self.patients.append(created)
            else:
                self.records[resource].append(created)
            return httpx.Response(201, json=created)

        if resource == "patients":
            if self.patients_down:
                return httpx.Response(503, json={"detail": "unavailable"})
            if len(parts) > 2:
                for patient in self.patients:
                    if str(patient["id"]) == parts[2]:
                        if self.detail_envelope:
                            return httpx.Response(200, json={self.detail_envelope: patient})
                        return httpx.Response(200, json=patient)
                return httpx.Response(404, json={"detail": "Not found."})
            return httpx.Response(200, json=self._wrap(self.patients))

        patient_id = request.url.params.get("patient") or request.url.params.get("patient_id")
        delay = self.delays.get(patient_id, 0)
        if delay:
            await asyncio.sleep(delay)
        if (resource, patient_id) in self.timeouts:
            raise httpx.ReadTimeout("read timed out", request=request)
        if (resource, patient_id) in self.failing or (resource, "*") in self.failing:
            return httpx.Response(500, json={"detail": "server error"})

        records = [r for r in self.records[resource] if str(r.get("patient_id")) == patient_id]
        return httpx.Response(200, json=self._wrap(records))

    def client(self) -> BackendClient:
        return BackendClient(base_url=BACKEND_URL, transport=httpx.MockTransport(self.handler))


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def fake_backend():
    """Empty in-memory records backend."""
    return FakeRecordsBackend()


@pytest.fixture
def backend(fake_backend):
    """BackendClient wired to the in-memory backend."""
    return fake_backend.client()


@pytest.fixture
def clinic(fake_backend):
    """
    Three patients with history:

    A: Normal BMI, general assessment on the vitals date
    B: Overweight BMI, overweight assessment
    C: Underweight BMI, no assessment yet
    """
    fake_backend.add_patient(PATIENT_A, patient_number="PA-001", first_name="Ada", last_name="Lovelace")
    fake_backend.add_patient(PATIENT_B, patient_number="PB-002", first_name="Ben", last_name="Okafor", gender="M")
    fake_backend.add_patient(PATIENT_C, patient_number="PC-003", first_name="Chen", last_name="Wu")

    fake_backend.add_vitals(PATIENT_A, "2024-01-10", 170, 70.2, 24.3)
    fake_backend.add_assessment("general-assessments", PATIENT_A, "2024-01-10", using_drugs="No")

    fake_backend.add_vitals(PATIENT_B, "2024-01-05", 160, 60, "23.4")
    fake_backend.add_vitals(PATIENT_B, "2024-02-01", 160, 70, "27.3")
    fake_backend.add_assessment("general-assessments", PATIENT_B, "2024-01-05", using_drugs="No")
    fake_backend.add_assessment("overweight-assessments", PATIENT_B, "2024-02-01", been_on_diet="Yes")

    fake_backend.add_vitals(PATIENT_C, "2024-02-20", 180, 55, 17.0)
    return fake_backend
