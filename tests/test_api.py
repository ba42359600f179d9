"""
API tests for GET /api/job-offers using FastAPI's TestClient.
"""

import pytest
from fastapi.testclient import TestClient

from job_offers.api import create_app
from job_offers.config import Settings
from job_offers.errors import QueryError
from job_offers.models import JobOffer


@pytest.fixture
def settings():
    return Settings(DATABASE_URL="sqlite://", SCHEDULER_ENABLED=False, MAX_PAGE_SIZE=50)


@pytest.fixture
def client(settings, store):
    store.save_new(
        [
            JobOffer(job_id="P1-666", title="Data Scientist", company="BackEnd Solutions", currency_unit="Dollar"),
            JobOffer(job_id="job-341", title="Frontend Developer", company="TechCorp"),
            JobOffer(job_id="job-342", title="Data Scientist", company="TechCorp"),
        ]
    )
    with TestClient(create_app(settings, store=store)) as c:
        yield c


def test_default_page(client):
    resp = client.get("/api/job-offers")

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["statusCode"] == 200
    assert "timestamp" in body

    data = body["data"]
    assert data["total"] == 3
    assert data["totalPages"] == 1
    assert data["hasNextPage"] is False
    assert data["hasPreviousPage"] is False
    assert data["page"] == 1
    assert data["page_size"] == 10

    first = next(o for o in data["data"] if o["jobId"] == "P1-666")
    assert first["currencyUnit"] == "Dollar"
    assert first["skils"] == "unknown"
    assert {"id", "createdAt", "companyWebSite", "salaryRange"} <= set(first)


def test_pagination_params(client):
    data = client.get("/api/job-offers", params={"page": 2, "page_size": 2}).json()["data"]

    assert len(data["data"]) == 1
    assert data["totalPages"] == 2
    assert data["hasPreviousPage"] is True
    assert data["hasNextPage"] is False


def test_filters_combine_and_ignore_empty(client):
    params = {"title": "Data Scientist", "company": "TechCorp", "location": "", "salary": ""}
    data = client.get("/api/job-offers", params=params).json()["data"]

    assert data["total"] == 1
    assert data["data"][0]["jobId"] == "job-342"


def test_page_size_over_cap_is_a_generic_400(client):
    resp = client.get("/api/job-offers", params={"page_size": 51})

    assert resp.status_code == 400
    assert resp.json()["detail"] == "can not fetch Job-offers"


@pytest.mark.parametrize("params", [{"page": 0}, {"page_size": 0}, {"page": -3}, {"page_size": -1}])
def test_out_of_range_paging_is_a_generic_400(client, params):
    resp = client.get("/api/job-offers", params=params)

    assert resp.status_code == 400
    assert resp.json() == {"detail": "can not fetch Job-offers"}


@pytest.mark.parametrize("params", [{"page": "abc"}, {"page_size": "ten"}])
def test_non_integer_paging_params(client, params):
    assert client.get("/api/job-offers", params=params).status_code == 422


def test_page_size_defaults_from_settings(store):
    store.save_new([JobOffer(job_id=str(i), title="Engineer") for i in range(5)])
    settings = Settings(DATABASE_URL="sqlite://", SCHEDULER_ENABLED=False, DEFAULT_PAGE_SIZE=2)

    with TestClient(create_app(settings, store=store)) as c:
        data = c.get("/api/job-offers").json()["data"]

    assert data["page_size"] == 2
    assert len(data["data"]) == 2
    assert data["totalPages"] == 3
    assert data["hasNextPage"] is True


def test_store_error_does_not_leak_details(settings):
    class FailingStore:
        def create_schema(self):
            pass

        def find_all(self, query):
            raise QueryError("connection refused at 10.0.0.5:5432")

    with TestClient(create_app(settings, store=FailingStore())) as c:
        resp = c.get("/api/job-offers")

    assert resp.status_code == 400
    assert "10.0.0.5" not in resp.text
    assert resp.json()["detail"] == "can not fetch Job-offers"


def test_lifespan_runs_given_scheduler(settings, store):
    class FakeScheduler:
        started = stopped = False

        def start_background(self):
            FakeScheduler.started = True

        def stop(self):
            FakeScheduler.stopped = True

    with TestClient(create_app(settings, store=store, scheduler=FakeScheduler())):
        assert FakeScheduler.started

    assert FakeScheduler.stopped
