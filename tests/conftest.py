"""Shared fixtures: provider payloads in both known shapes and an in-memory store."""

import copy

import pytest

from job_offers.store import JobOfferStore

LIST_PAYLOAD = {
    "metadata": {"requestId": "req-1", "timestamp": "2025-07-15T05:04:39.783Z"},
    "jobs": [
        {
            "jobId": "P1-666",
            "title": "Data Scientist",
            "details": {
                "location": "Seattle, WA",
                "type": "Contract",
                "salaryRange": "$87k - $129k",
            },
            "company": {"name": "BackEnd Solutions", "industry": "Solutions"},
            "skills": ["Python", "SQL"],
            "postedDate": "2025-07-15",
        },
        {
            "jobId": "P1-229",
            "title": "Backend Engineer",
            "details": {
                "location": "Austin, TX",
                "type": "Full-Time",
                "salaryRange": "€61k - €98k",
            },
            "company": {"name": "DataWorks", "industry": "Analytics"},
            "skills": ["Java", "Spring Boot", "AWS"],
            "postedDate": "2025-07-14T10:00:00.000Z",
        },
    ],
}

MAP_PAYLOAD = {
    "status": "success",
    "data": {
        "jobsList": {
            "job-341": {
                "position": "Frontend Developer",
                "location": {"city": "Seattle", "state": "NY", "remote": True},
                "compensation": {"min": 65000, "max": 93000, "currency": "USD"},
                "employer": {"companyName": "TechCorp", "website": "https://techcorp.com"},
                "requirements": {"experience": 3, "technologies": ["Java", "Spring Boot", "AWS"]},
                "datePosted": "2025-07-14",
            },
            "job-722": {
                "position": "Data Engineer",
                "location": {"city": "Austin", "state": "TX", "remote": False},
                "compensation": {"min": 50000, "max": 80000, "currency": "GBP"},
                "employer": {"companyName": "Creative Design Ltd"},
                "datePosted": "2025-07-10",
            },
        }
    },
}


@pytest.fixture
def list_payload():
    return copy.deepcopy(LIST_PAYLOAD)


@pytest.fixture
def map_payload():
    return copy.deepcopy(MAP_PAYLOAD)


@pytest.fixture
def store():
    s = JobOfferStore("sqlite://")
    s.create_schema()
    yield s
    s.engine.dispose()


class StaticSource:
    """Provider source returning a fixed payload (or raising a fixed error)."""

    def __init__(self, name, payload=None, error=None):
        self.name = name
        self.payload = payload
        self.error = error
        self.calls = 0

    def fetch(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return copy.deepcopy(self.payload)


@pytest.fixture
def static_source():
    return StaticSource
