"""
Unit tests for the deduplicating store and the paginated query.
"""

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import OperationalError

from job_offers.errors import QueryError
from job_offers.models import JobOffer, StoredJobOffer
from job_offers.query import JobOfferFilter, JobOfferQuery, paginate
from job_offers.store import JobOfferStore


def offer(job_id, title="Engineer", **kwargs):
    return JobOffer(job_id=job_id, title=title, **kwargs)


def test_save_new_inserts_and_assigns_id(store):
    result = store.save_new([offer("1", location="Seattle, WA", experience=3)])

    assert result.inserted == 1
    assert result.skipped == 0
    assert result.ok

    page = store.find_all(JobOfferQuery())
    stored = page.data[0]
    assert isinstance(stored, StoredJobOffer)
    assert stored.id
    assert stored.created_at is not None
    assert stored.job_id == "1"
    assert stored.location == "Seattle, WA"
    assert stored.experience == "3"


def test_same_dedup_key_is_persisted_once(store):
    first = offer("P1-666", "Data Scientist", company="First")
    second = offer("P1-666", "Data Scientist", company="Second")

    result = store.save_new([first, second])

    assert (result.inserted, result.skipped) == (1, 1)
    assert store.count() == 1
    assert store.find_all(JobOfferQuery()).data[0].company == "First"


def test_reused_job_id_with_different_title_is_kept(store):
    result = store.save_new([offer("1", "Engineer"), offer("1", "Designer")])

    assert result.inserted == 2
    assert store.exists("1", "Engineer")
    assert store.exists("1", "Designer")
    assert not store.exists("1", "Manager")


def test_existing_records_are_never_updated(store):
    store.save_new([offer("1", company="Original")])
    result = store.save_new([offer("1", company="Changed")])

    assert (result.inserted, result.skipped) == (0, 1)
    assert store.find_all(JobOfferQuery()).data[0].company == "Original"


def test_write_failure_does_not_abort_batch(store, monkeypatch):
    """A persistence error on one record is recorded and the rest still get written."""
    real_exists = store.exists

    def flaky_exists(job_id, title, session=None):
        if job_id == "bad":
            raise OperationalError("SELECT", {}, Exception("disk I/O error"))
        return real_exists(job_id, title, session=session)

    monkeypatch.setattr(store, "exists", flaky_exists)

    result = store.save_new([offer("1"), offer("bad"), offer("2")])

    assert result.inserted == 2
    assert result.failed == ["bad / Engineer"]
    assert not result.ok
    assert store.count() == 2


@pytest.mark.parametrize(
    "total, page, page_size, expected",
    [
        (25, 1, 10, (3, True, False)),
        (25, 2, 10, (3, True, True)),
        (25, 3, 10, (3, False, True)),
        (30, 3, 10, (3, False, True)),
        (0, 1, 10, (0, False, False)),
        (1, 1, 1, (1, False, False)),
    ],
)
def test_paginate(total, page, page_size, expected):
    meta = paginate(total, page, page_size)
    assert (meta["total_pages"], meta["has_next_page"], meta["has_previous_page"]) == expected
    assert meta["total"] == total


def test_find_all_pages_are_stable_and_disjoint(store):
    store.save_new([offer(str(i)) for i in range(25)])

    pages = [store.find_all(JobOfferQuery(page=p, page_size=10)) for p in (1, 2, 3)]

    assert [len(p.data) for p in pages] == [10, 10, 5]
    ids = [o.id for p in pages for o in p.data]
    assert len(set(ids)) == 25
    assert pages[0].total == 25
    assert pages[0].total_pages == 3
    assert not pages[2].has_next_page and pages[2].has_previous_page
    assert not pages[0].has_previous_page

    again = store.find_all(JobOfferQuery(page=2, page_size=10))
    assert [o.id for o in again.data] == [o.id for o in pages[1].data]


def test_page_past_the_end_is_empty(store):
    store.save_new([offer("1")])
    page = store.find_all(JobOfferQuery(page=5, page_size=10))
    assert page.data == []
    assert page.total == 1
    assert page.has_previous_page


def test_filters_are_anded(store):
    store.save_new(
        [
            offer("1", "Data Scientist", company="TechCorp"),
            offer("2", "Data Scientist", company="DataWorks"),
            offer("3", "Frontend Developer", company="TechCorp"),
        ]
    )

    flt = JobOfferFilter(title="Data Scientist", company="TechCorp")
    page = store.find_all(JobOfferQuery(filter=flt))

    assert page.total == 1
    assert page.data[0].job_id == "1"


def test_filters_are_exact_match(store):
    store.save_new([offer("1", location="Seattle, WA (OnSite)", salary_range="$87k - $129k")])

    assert store.find_all(JobOfferQuery(filter=JobOfferFilter(location="Seattle"))).total == 0
    assert store.find_all(JobOfferQuery(filter=JobOfferFilter(location="Seattle, WA (OnSite)"))).total == 1
    assert store.find_all(JobOfferQuery(filter=JobOfferFilter(salary="$87k - $129k"))).total == 1


def test_blank_filter_fields_are_not_applied(store):
    store.save_new([offer("1"), offer("2")])
    flt = JobOfferFilter(title="", location="  ", salary=None, company="")

    assert flt.active() == {}
    assert store.find_all(JobOfferQuery(filter=flt)).total == 2


@pytest.mark.parametrize("params", [{"page": 0}, {"page_size": 0}, {"page_size": 101}])
def test_invalid_paging_is_rejected(params):
    with pytest.raises(ValidationError):
        JobOfferQuery(**params)


def test_page_size_cap_from_context():
    with pytest.raises(ValidationError):
        JobOfferQuery.model_validate({"page_size": 30}, context={"max_page_size": 25})
    assert JobOfferQuery.model_validate({"page_size": 500}, context={"max_page_size": 500}).page_size == 500


def test_store_failure_surfaces_as_query_error():
    store = JobOfferStore("sqlite://")  # schema never created

    with pytest.raises(QueryError):
        store.find_all(JobOfferQuery())
