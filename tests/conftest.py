"""
Pytest configuration and shared fixtures.
"""

import pytest

from sponsorcheck.config import Settings
from sponsorcheck.logger import StructuredLogger, get_logger, reset_logger
from sponsorcheck.page import Page
from sponsorcheck.timers import ManualScheduler

SEARCH_URL = "https://www.linkedin.com/jobs/search/?currentJobId={job_id}&keywords=python"

# US citizens only -> no sponsorship, high confidence
DESCRIPTION_A = (
    "We are hiring a backend engineer to build data pipelines for our analytics platform. "
    "US citizens only. This role requires on-site work in Austin three days a week."
)

# Explicit sponsorship offer
DESCRIPTION_B = (
    "Join our platform team building distributed systems at scale. "
    "We offer visa sponsorship and relocation assistance for the right candidate."
)

# No sponsorship language at all
DESCRIPTION_C = (
    "We are hiring a backend engineer to build data pipelines for our analytics platform. "
    "The team is small, remote friendly and ships to customers every single week."
)


def job_page_html(description: str = DESCRIPTION_A, title: str = "Backend Engineer") -> str:
    """Search results page with a job list and the selected job's details pane."""
    return f"""
    <html>
    <head><title>Jobs</title></head>
    <body>
        <nav class="global-nav"><a href="/feed/">Home</a></nav>
        <ul class="jobs-search-results-list">
            <li class="job-card-container" data-job-id="111"><a href="#">Backend Engineer</a></li>
            <li class="job-card-container" data-job-id="222"><a href="#">Platform Engineer</a></li>
        </ul>
        <div class="jobs-search__job-details">
            <div class="jobs-details__main-content">
                <div class="jobs-details-top-card">
                    <div class="jobs-details-top-card__job-title-lockup">
                        <h1 class="job-title">{title}</h1>
                    </div>
                </div>
                <div class="jobs-description">
                    <div class="jobs-description-content__text">{description}</div>
                </div>
            </div>
        </div>
    </body>
    </html>
    """


@pytest.fixture(autouse=True)
def quiet_logger():
    """Global logger without console output, reset around every test."""
    reset_logger()
    get_logger(enable_console=False)
    yield
    reset_logger()


@pytest.fixture
def logger() -> StructuredLogger:
    """Dedicated logger so tests can read its metrics."""
    return StructuredLogger(name="sponsorcheck.test", enable_console=False)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def job_page() -> Page:
    """Job 111 showing DESCRIPTION_A."""
    return Page(job_page_html(DESCRIPTION_A), SEARCH_URL.format(job_id="111"))


@pytest.fixture
def loading_page() -> Page:
    """Job 111 whose description has not been rendered yet."""
    return Page(job_page_html(""), SEARCH_URL.format(job_id="111"))
