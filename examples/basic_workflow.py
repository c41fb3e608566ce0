#!/usr/bin/env python3
"""
Basic workflow example.

Builds a two-machine farm, submits a few jobs and prints each job's
estimated completion time.
"""

from datetime import timedelta

from batchfarm.errors import JobTooLargeError
from batchfarm.farm import Dimensions, Farm, JobFamily, Machine, PlacementPolicy, PrintJob
from batchfarm.utils import setup_logging


def main():
    setup_logging("INFO")

    farm = Farm(placement=PlacementPolicy.ROUND_ROBIN)
    farm.add_machine(Machine(Dimensions(300, 200, 400), name="M1"))
    farm.add_machine(Machine(Dimensions(100, 150, 350), name="M2"))

    pla = JobFamily("PLA", {"material": "pla", "layer_height": "0.2"})
    petg = JobFamily("PETG", {"material": "petg", "layer_height": "0.2"})

    jobs = [
        PrintJob.create(Dimensions(200, 100, 50), timedelta(days=3), timedelta(minutes=70), pla, name="bracket"),
        PrintJob.create(Dimensions(80, 80, 40), timedelta(days=1), timedelta(minutes=45), pla, name="cover"),
        PrintJob.create(Dimensions(90, 100, 100), timedelta(days=2), timedelta(minutes=120), petg, name="housing"),
        PrintJob.create(Dimensions(1000, 1000, 1000), timedelta(days=7), timedelta(hours=24), pla, name="statue"),
    ]

    for job in jobs:
        try:
            location = farm.add_job(job)
        except JobTooLargeError as e:
            print(f"Rejected {job.name}: {e}")
            continue
        eta = farm.estimated_completion(job.job_id)
        machine = farm.machines[location.machine_index]
        print(f"{job.name}: {machine.name} batch {location.batch_index}, ETA {eta:%Y-%m-%d %H:%M}")


if __name__ == "__main__":
    main()
