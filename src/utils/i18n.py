"""Translation callbacks for heatmap tooltips and day names.

The heatmap core only hands out message keys and named parameters; this
module supplies a default English catalog and a loader for YAML catalogs.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Callable, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_MESSAGES: dict[str, str] = {
    "common.days.monday": "Monday",
    "common.days.tuesday": "Tuesday",
    "common.days.wednesday": "Wednesday",
    "common.days.thursday": "Thursday",
    "common.days.friday": "Friday",
    "common.days.saturday": "Saturday",
    "common.days.sunday": "Sunday",
    "heatmap.overall.average.tooltip": "{day} {hour}:00 - average {utilization}% occupied",
    "heatmap.overall.weightedAverage.tooltip": (
        "{day} {hour}:00 - weighted average {utilization}% occupied"
    ),
    "heatmap.overall.median.tooltip": "{day} {hour}:00 - median {utilization}% occupied",
    "heatmap.weekly.percentage.tooltip": "{day} {hour}:00 - {utilization}% occupied",
    "heatmap.weekly.minMax.tooltip": "{day} {hour}:00 - {min} to {max} people",
    "heatmap.weekly.average.tooltip": "{day} {hour}:00 - {average} people on average",
}


class _KeepMissing(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def make_translator(
    messages: Optional[Mapping[str, str]] = None,
) -> Callable[[str, Mapping[str, object]], str]:
    """Build a ``(key, params) -> str`` translation callback.

    Unknown keys translate to themselves; unknown placeholders are kept.

    Args:
        messages: Key to template mapping, merged over the defaults.
    """
    catalog = {**DEFAULT_MESSAGES, **(messages or {})}

    def translate(key: str, params: Mapping[str, object]) -> str:
        template = catalog.get(key)
        if template is None:
            return key
        return template.format_map(_KeepMissing(params))

    return translate


def _flatten(data: Mapping, prefix: str = "") -> dict[str, str]:
    flat: dict[str, str] = {}
    for key, value in data.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            flat.update(_flatten(value, full_key))
        else:
            flat[full_key] = str(value)
    return flat


def load_messages(messages_path: str) -> dict[str, str]:
    """Load a message catalog from YAML.

    Nested mappings are flattened into dotted keys, so ``common: {days:
    {monday: Pondeli}}`` becomes ``common.days.monday``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file does not contain a mapping.
    """
    path = Path(messages_path)
    if not path.exists():
        raise FileNotFoundError(f"Messages file not found: {messages_path}")

    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"Invalid messages file: expected a mapping in {messages_path}")

    messages = _flatten(raw)
    logger.info("Loaded %d messages from %s", len(messages), messages_path)
    return messages
