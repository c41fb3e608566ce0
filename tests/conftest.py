"""Shared fixtures for batchfarm tests."""

from datetime import datetime, timedelta, timezone

import pytest

from batchfarm.config import configure
from batchfarm.farm.models import Dimensions, JobFamily, PrintJob

NOW = datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)

F1 = JobFamily("F1", {"material": "pla", "layer_height": "0.2"})
F2 = JobFamily("F2", {"material": "petg", "layer_height": "0.2"})


def make_job(dims=(10, 10, 10), minutes=60, family=F1, name="", job_id=None) -> PrintJob:
    """Create a job due three days after NOW."""
    return PrintJob.create(
        Dimensions(*dims),
        time_till_due=timedelta(days=3),
        print_duration=timedelta(minutes=minutes),
        family=family,
        name=name,
        now=NOW,
        job_id=job_id,
    )


@pytest.fixture(autouse=True)
def reset_settings():
    """Drop cached global settings between tests."""
    configure(None)
    yield
    configure(None)
