"""Configuration management for occupancy heatmaps.

Loads and validates YAML configuration files for heatmap rendering,
locale settings and facility definitions (capacity, opening hours).
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from .date_utils import DAYS_OF_WEEK, DEFAULT_TIMEZONE

logger = logging.getLogger(__name__)

WEEKEND_DAYS = {"Saturday", "Sunday"}


@dataclass
class HeatmapConfig:
    """Configuration for heatmap colors and cell geometry."""

    high_threshold: float = 60
    uniform_bar_height: bool = False
    cell_width: int = 40
    cell_height: int = 24


@dataclass
class LocaleConfig:
    """Configuration for timezone and translations."""

    timezone: str = DEFAULT_TIMEZONE
    language: str = "en"
    messages_file: Optional[str] = None


@dataclass
class LoggingConfig:
    """Configuration for application logging."""

    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class DashboardConfig:
    """Configuration for Streamlit dashboard."""

    host: str = "0.0.0.0"
    port: int = 8501


@dataclass
class AppConfig:
    """Top-level application configuration."""

    heatmap: HeatmapConfig = field(default_factory=HeatmapConfig)
    locale: LocaleConfig = field(default_factory=LocaleConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    dashboard: DashboardConfig = field(default_factory=DashboardConfig)


def parse_opening_hours(value: str) -> range:
    """Parse a ``"start-end"`` opening hours string into open hours.

    ``"6-22"`` means open from 6:00 until 22:00, i.e. hours 6 to 21.

    Raises:
        ValueError: If the string is malformed or out of range.
    """
    try:
        start_str, end_str = value.split("-")
        start, end = int(start_str), int(end_str)
    except ValueError as exc:
        raise ValueError(f"Invalid opening hours '{value}'") from exc
    if not 0 <= start < end <= 24:
        raise ValueError(f"Invalid opening hours '{value}'")
    return range(start, end)


@dataclass
class FacilityConfig:
    """A facility whose occupancy is tracked.

    Attributes:
        name: Facility identifier.
        maximum_capacity: Headcount treated as 100% utilization.
        csv_file: Path of the facility's readings CSV.
        weekdays_opening_hours: ``"start-end"`` hours Monday to Friday.
        weekend_opening_hours: ``"start-end"`` hours on weekends.
        custom_name: Display name overriding ``name``.
        view_stats: Whether the facility is offered by default. Hidden
            facilities are only used when requested by name.
        temporarily_closed: Free-text closure notice.
    """

    name: str
    maximum_capacity: int
    csv_file: Optional[str] = None
    weekdays_opening_hours: str = "6-22"
    weekend_opening_hours: str = "8-22"
    custom_name: Optional[str] = None
    view_stats: bool = True
    temporarily_closed: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.custom_name or self.name

    def opening_hours(self, day: str) -> range:
        """Return the open hours of a weekday."""
        if day in WEEKEND_DAYS:
            return parse_opening_hours(self.weekend_opening_hours)
        return parse_opening_hours(self.weekdays_opening_hours)

    def display_hours(self) -> list[int]:
        """Return every hour the facility is open on any weekday."""
        hours: set[int] = set()
        for day in DAYS_OF_WEEK:
            hours.update(self.opening_hours(day))
        return sorted(hours)


def load_config(config_path: str) -> AppConfig:
    """Load application configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Populated AppConfig instance.

    Raises:
        FileNotFoundError: If the config file does not exist.
        yaml.YAMLError: If the file contains invalid YAML.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path) as f:
        raw = yaml.safe_load(f)

    if raw is None:
        logger.warning("Empty config file, using defaults")
        return AppConfig()

    config = AppConfig(
        heatmap=HeatmapConfig(**raw.get("heatmap", {})),
        locale=LocaleConfig(**raw.get("locale", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        dashboard=DashboardConfig(**raw.get("dashboard", {})),
    )

    logger.info("Configuration loaded from %s", config_path)
    return config


def load_facilities(facilities_path: str) -> list[FacilityConfig]:
    """Load facility definitions from a YAML file.

    Args:
        facilities_path: Path to the facilities YAML file.

    Returns:
        List of FacilityConfig instances.

    Raises:
        FileNotFoundError: If the facilities file does not exist.
        ValueError: If the file is missing required fields.
    """
    path = Path(facilities_path)
    if not path.exists():
        raise FileNotFoundError(f"Facilities file not found: {facilities_path}")

    with open(path) as f:
        raw = yaml.safe_load(f)

    if raw is None or "facilities" not in raw:
        raise ValueError(
            f"Invalid facilities file: missing 'facilities' key in {facilities_path}"
        )

    facilities = []
    for facility_data in raw["facilities"]:
        if "name" not in facility_data or "maximum_capacity" not in facility_data:
            raise ValueError(
                f"Facility definition missing 'name' or 'maximum_capacity': "
                f"{facility_data}"
            )
        facilities.append(FacilityConfig(**facility_data))

    logger.info("Loaded %d facilities from %s", len(facilities), facilities_path)
    return facilities


def find_facility(facilities: list[FacilityConfig], name: str) -> FacilityConfig:
    """Return the facility called ``name``.

    Raises:
        KeyError: If no facility has that name.
    """
    for facility in facilities:
        if facility.name == name:
            return facility
    raise KeyError(f"Unknown facility: {name}")


def default_facility(facilities: list[FacilityConfig]) -> FacilityConfig:
    """Return the first facility whose statistics are offered for viewing.

    Raises:
        ValueError: If every facility has ``view_stats`` disabled.
    """
    for facility in facilities:
        if facility.view_stats:
            return facility
    raise ValueError("No viewable facilities defined")
