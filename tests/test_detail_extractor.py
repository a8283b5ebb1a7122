# tests/test_detail_extractor.py
from conftest import job_posting, jsonld_script

from modules.talent_jobs.lib.extractors.detail import extract_job_detail

DETAIL_URL = "https://www.talent.com/view?id=abc"


def test_dedicated_script_wins_over_other_postings(make_page):
    other = job_posting("Unrelated", "https://www.talent.com/view?id=zzz")
    dedicated = job_posting(
        "Platform Engineer",
        DETAIL_URL,
        hiringOrganization={"name": "Acme"},
        jobLocation={"address": {"addressLocality": "Austin"}},
        employmentType="FULL_TIME",
        description="<p>Own the <b>platform</b>.</p>",
        datePosted="2025-01-03",
    )
    head = jsonld_script(other) + jsonld_script(dedicated, script_id="job-data-ld+json")
    detail = extract_job_detail(make_page(head=head, url=DETAIL_URL), job_id="abc")

    assert detail.job_id == "abc"
    assert detail.title == "Platform Engineer"
    assert detail.company == "Acme"
    assert detail.location == "Austin"
    assert detail.job_type == "FULL_TIME"
    assert detail.description == "Own the platform ."
    assert detail.description_html == "<p>Own the <b>platform</b>.</p>"
    assert detail.date_posted == "2025-01-03"
    assert detail.url == DETAIL_URL


def test_posting_matching_page_url_is_preferred(make_page):
    head = jsonld_script(
        [job_posting("Similar job", "https://www.talent.com/view?id=other"), job_posting("This job", DETAIL_URL)]
    )
    detail = extract_job_detail(make_page(head=head, url=DETAIL_URL + "#top"))
    assert detail.title == "This job"


def test_description_is_truncated(make_page):
    posting = job_posting("Long", DETAIL_URL, description="word " * 3000)
    detail = extract_job_detail(make_page(head=jsonld_script(posting), url=DETAIL_URL))
    assert len(detail.description) == 5000


def test_dom_fallback(make_page):
    body = (
        "<main>"
        "<h1>Site Reliability Engineer</h1>"
        '<div data-testid="company-name">Globex</div>'
        '<div data-testid="job-location">Denver, CO</div>'
        '<span class="job-type">Contract</span>'
        "<span>Posted 3 days ago</span>"
        "<section><span>Job description</span><div>ignored</div><div><p>Keep   it <b>up</b></p></div></section>"
        "</main>"
    )
    detail = extract_job_detail(make_page(body, url=DETAIL_URL), job_id="abc")

    assert detail.title == "Site Reliability Engineer"
    assert detail.company == "Globex"
    assert detail.location == "Denver, CO"
    assert detail.job_type == "Contract"
    assert detail.date_posted == "Posted 3 days ago"
    assert detail.description == "Keep it up"
    assert detail.description_html == "<p>Keep   it <b>up</b></p>"


def test_header_block_fallback_splits_company_and_location(make_page):
    body = (
        '<div class="sc-668ba90a-3 xyz"><span>Nurse</span><span>Mercy Health \ufffd Springfield</span></div>'
        '<div class="job-description"><p>Care for patients</p></div>'
    )
    detail = extract_job_detail(make_page(body, url=DETAIL_URL))
    assert detail.title == "Nurse"
    assert detail.company == "Mercy Health"
    assert detail.location == "Springfield"
    assert detail.description == "Care for patients"


def test_page_with_nothing_extractable_still_yields_detail(make_page):
    detail = extract_job_detail(make_page("<div>?</div>", url=DETAIL_URL), job_id="abc")
    assert detail.job_id == "abc"
    assert detail.url == DETAIL_URL
    assert detail.description == ""
    assert detail.description_html == ""
    assert detail.title == ""
