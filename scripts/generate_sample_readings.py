"""Generate a synthetic occupancy readings CSV for testing and demonstration.

Creates several weeks of readings every 15 minutes during opening hours,
with a midday and an evening peak and quieter weekends.
"""

from datetime import date, timedelta
from pathlib import Path

import numpy as np

DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def generate_sample_readings(
    output_path: str = "data/sample/readings.csv",
    start: date = date(2024, 3, 4),
    weeks: int = 4,
    capacity: int = 120,
    open_hour: int = 6,
    close_hour: int = 22,
) -> str:
    """Generate a synthetic readings CSV.

    Args:
        output_path: Path for the output CSV file.
        start: First day of the data, ideally a Monday.
        weeks: Number of weeks to generate.
        capacity: Maximum capacity the headcounts are scaled to.
        open_hour: First hour with readings.
        close_hour: Hour after the last reading.

    Returns:
        Path to the generated CSV file.
    """
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    rng = np.random.RandomState(42)

    lines = ["Date,Day,Time,Occupancy"]
    for offset in range(weeks * 7):
        day = start + timedelta(days=offset)
        weekend_factor = 0.6 if day.weekday() >= 5 else 1.0
        for hour in range(open_hour, close_hour):
            midday = np.exp(-((hour - 12) ** 2) / 8)
            evening = np.exp(-((hour - 18) ** 2) / 4)
            base = capacity * 0.6 * weekend_factor * max(midday, evening)
            for minute in (0, 15, 30, 45):
                count = max(0, int(rng.normal(base, base * 0.15 + 1)))
                lines.append(
                    f"{day.day:02d}.{day.month:02d}.{day.year},"
                    f"{DAY_NAMES[day.weekday()]},{hour:02d}:{minute:02d},{count}"
                )

    Path(output_path).write_text("\n".join(lines) + "\n")
    print(f"Sample readings generated: {output_path} ({len(lines) - 1} rows)")
    return output_path


if __name__ == "__main__":
    generate_sample_readings()
