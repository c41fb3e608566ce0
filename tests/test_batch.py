"""Tests for batches and machines."""

import pytest
from datetime import timedelta

from batchfarm.errors import CapacityExceededError, IncompatibleFamilyError, IndexOutOfRangeError
from batchfarm.farm.batch import Batch
from batchfarm.farm.machine import Machine
from batchfarm.farm.models import Dimensions

from conftest import F1, F2, NOW, make_job


CAPACITY = Dimensions(300, 200, 400)


class TestBatch:
    """Tests for Batch class."""

    @pytest.fixture
    def batch(self):
        return Batch(CAPACITY, NOW)

    def test_new_batch_is_empty(self, batch):
        """Test a new batch has no jobs and zero duration."""
        assert batch.is_empty
        assert batch.family is None
        assert batch.print_duration == timedelta(0)
        assert batch.est_completion_time() == NOW
        assert batch.occupied == Dimensions.zero()

    def test_family_taken_from_first_job(self, batch):
        """Test the first admitted job sets the batch family."""
        batch.add(make_job(family=F1))
        assert batch.family.compatible_with(F1)

    def test_incompatible_job_rejected(self, batch):
        """Test adding a job of another family raises."""
        batch.add(make_job(family=F1))
        assert not batch.accepts(make_job(family=F2))
        with pytest.raises(IncompatibleFamilyError):
            batch.add(make_job(family=F2))
        assert len(batch) == 1

    def test_capacity_exceeded_rejected(self, batch):
        """Test adding a job that does not fit raises."""
        batch.add(make_job(dims=(250, 150, 350)))
        assert not batch.can_fit(Dimensions(100, 100, 100))
        with pytest.raises(CapacityExceededError):
            batch.add(make_job(dims=(100, 100, 100)))

    def test_can_fit_uses_running_sum(self, batch):
        """Test capacity accounts for every job already in the batch."""
        batch.add(make_job(dims=(100, 50, 100)))
        batch.add(make_job(dims=(100, 50, 100)))
        assert batch.occupied == Dimensions(200, 100, 200)
        assert batch.remaining == Dimensions(100, 100, 200)
        assert batch.can_fit(Dimensions(100, 100, 200))
        assert not batch.can_fit(Dimensions(101, 1, 1))

    def test_duration_is_max_of_items(self, batch):
        """Test the slowest job sets the batch duration."""
        batch.add(make_job(minutes=30))
        batch.add(make_job(minutes=90))
        batch.add(make_job(minutes=45))
        assert batch.print_duration == timedelta(minutes=90)
        assert batch.est_completion_time() == NOW + timedelta(minutes=90)

    def test_remove_shrinks_duration(self, batch):
        """Test removing the slowest job shortens the batch."""
        batch.add(make_job(minutes=30))
        slow = make_job(minutes=90)
        batch.add(slow)

        removed = batch.remove(1)

        assert removed is slow
        assert batch.print_duration == timedelta(minutes=30)
        assert batch.occupied == Dimensions(10, 10, 10)

    def test_remove_last_job_resets(self, batch):
        """Test an emptied batch has zero duration and no family."""
        batch.add(make_job(family=F1))
        batch.remove(0)
        assert batch.print_duration == timedelta(0)
        assert batch.est_completion_time() == batch.start_time
        assert batch.family is None
        assert batch.accepts(make_job(family=F2))

    def test_remove_out_of_range(self, batch):
        """Test invalid indices raise IndexOutOfRangeError."""
        batch.add(make_job())
        with pytest.raises(IndexOutOfRangeError):
            batch.remove(1)
        with pytest.raises(IndexOutOfRangeError):
            batch.remove(-1)
        # Also an IndexError for generic handlers
        with pytest.raises(IndexError):
            batch.remove(5)

    def test_to_dict(self, batch):
        batch.add(make_job(minutes=20, name="clip"))
        d = batch.to_dict()
        assert d["family"]["name"] == "F1"
        assert d["print_duration_seconds"] == 1200
        assert d["items"][0]["name"] == "clip"


class TestMachine:
    """Tests for Machine class."""

    def test_new_machine_has_one_empty_batch(self):
        """Test a machine starts with one open batch."""
        machine = Machine(CAPACITY, start_time=NOW)
        assert machine.name == "Untitled"
        assert machine.is_running is False
        assert len(machine.schedule) == 1
        assert machine.schedule[0].is_empty
        assert machine.schedule[0].capacity == CAPACITY
        assert machine.schedule[0].start_time == NOW

    def test_open_batch_starts_after_last(self):
        """Test a new batch starts when the previous one completes."""
        machine = Machine(CAPACITY, name="M1", start_time=NOW)
        machine.schedule[0].add(make_job(minutes=70))

        batch = machine.open_batch()

        assert batch.start_time == NOW + timedelta(minutes=70)
        assert machine.schedule[-1] is batch

    def test_reflow_keeps_queue_ordered(self):
        """Test batches are re-anchored after an earlier batch grows."""
        machine = Machine(CAPACITY, start_time=NOW)
        machine.schedule[0].add(make_job(minutes=30))
        second = machine.open_batch()
        second.add(make_job(minutes=10))

        machine.schedule[0].add(make_job(minutes=60))
        machine.reflow()

        assert second.start_time == NOW + timedelta(minutes=60)
        assert machine.completion_time == NOW + timedelta(minutes=70)

    def test_can_hold(self):
        machine = Machine(CAPACITY, start_time=NOW)
        assert machine.can_hold(Dimensions(300, 200, 400))
        assert not machine.can_hold(Dimensions(301, 1, 1))

    def test_job_count(self):
        machine = Machine(CAPACITY, start_time=NOW)
        machine.schedule[0].add(make_job(job_id="a"))
        machine.open_batch().add(make_job(job_id="b"))
        assert machine.job_count == 2
        assert [job.job_id for job in machine.jobs()] == ["a", "b"]

    def test_from_dict(self):
        """Test creating a machine from a definition."""
        machine = Machine.from_dict(
            {"name": "Prusa", "capacity": [250, 210, 220], "config": {"nozzle": 0.4}},
            start_time=NOW,
        )
        assert machine.name == "Prusa"
        assert machine.capacity == Dimensions(250, 210, 220)
        assert machine.config == {"nozzle": "0.4"}

    def test_from_dict_default_capacity(self):
        machine = Machine.from_dict({"name": "X1"}, default_capacity=Dimensions(256, 256, 256))
        assert machine.capacity == Dimensions(256, 256, 256)

    def test_from_dict_without_capacity_raises(self):
        with pytest.raises(ValueError):
            Machine.from_dict({"name": "X1"})

    def test_to_dict(self):
        machine = Machine(CAPACITY, name="M1", start_time=NOW)
        d = machine.to_dict()
        assert d["name"] == "M1"
        assert d["is_running"] is False
        assert len(d["schedule"]) == 1
