"""Build farms and jobs from JSON definitions."""

import json
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from batchfarm.config import Settings, get_settings
from batchfarm.errors import ConfigError
from batchfarm.farm.farm import Farm
from batchfarm.farm.machine import Machine
from batchfarm.farm.models import Dimensions, JobFamily, PrintJob
from batchfarm.utils import get_logger, utc_now

logger = get_logger("farm.loader")


def load_json(file_path: Union[str, Path]) -> Any:
    """
    Load a JSON document.

    Raises:
        ConfigError: If the file is missing, unreadable, not UTF-8 or not valid JSON
    """
    path = Path(file_path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"File not found: {path}") from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"File is not valid UTF-8: {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e


def farm_from_config(
    config: Dict[str, Any],
    settings: Optional[Settings] = None,
    now: Optional[datetime] = None,
) -> Farm:
    """
    Create a Farm from a configuration dictionary.

    Args:
        config: Dictionary with a "machines" list and optional "policy"
        settings: Settings providing defaults (global settings if omitted)
        now: Start time of every machine's first batch

    Returns:
        Farm with one empty batch per machine
    """
    settings = settings or get_settings()
    now = now or utc_now()
    default_capacity = Dimensions(
        settings.default_build_x,
        settings.default_build_y,
        settings.default_build_z,
    )

    try:
        machines = [
            Machine.from_dict(machine_config, default_capacity=default_capacity, start_time=now)
            for machine_config in config.get("machines", [])
        ]
        farm = Farm(machines, placement=config.get("policy", settings.placement_policy))
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ConfigError(f"Invalid farm definition: {e}") from e

    logger.info(f"Loaded farm with {len(machines)} machine(s), placement {farm.placement.name}")
    return farm


def job_from_dict(data: Dict[str, Any], now: Optional[datetime] = None) -> PrintJob:
    """Create a PrintJob from a job definition dictionary."""
    return PrintJob.create(
        dims=Dimensions.from_value(data["dims"]),
        time_till_due=timedelta(hours=float(data.get("due_in_hours", 0))),
        print_duration=timedelta(minutes=float(data.get("print_minutes", 0))),
        family=JobFamily.from_dict(data.get("family", {})),
        name=data.get("name", ""),
        now=now,
        job_id=data.get("job_id"),
    )


def jobs_from_config(config: List[Dict[str, Any]], now: Optional[datetime] = None) -> List[PrintJob]:
    """Create jobs from a list of job definitions."""
    now = now or utc_now()
    try:
        return [job_from_dict(job_config, now=now) for job_config in config]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ConfigError(f"Invalid job definition: {e}") from e


def load_farm(file_path: Union[str, Path], settings: Optional[Settings] = None) -> Farm:
    """Load a farm definition file."""
    return farm_from_config(load_json(file_path), settings=settings)


def load_jobs(file_path: Union[str, Path]) -> List[PrintJob]:
    """Load a job list file."""
    data = load_json(file_path)
    if not isinstance(data, list):
        raise ConfigError(f"Job file {file_path} must contain a JSON list")
    return jobs_from_config(data)
