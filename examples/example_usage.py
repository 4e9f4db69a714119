"""Example: drive the service layer directly (no Flask).

Clocks an employee in and out, logs two cells into this week's matrix and prints the totals.
"""

import importlib
from datetime import timedelta

from config import get_settings_module

from src.timesheet_system.timesheet_system.common.datetime_utils import utc_now, week_start_for
from src.timesheet_system.timesheet_system.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    now = utc_now()
    clock = container.clock_service
    clock.clock_in(2, now=now - timedelta(hours=3))
    record = clock.clock_out(2, now=now)
    print("clocked:", record.to_dict())

    service = container.timesheet_service
    monday = week_start_for(now.date())
    holder = service.add_task_row(2, monday, project_id=1, task_name="Design")
    service.upsert_cell(holder, monday, 4, "wireframes")
    service.upsert_cell(holder, monday + timedelta(days=1), 2.5)

    print(service.describe_matrix(service.build_weekly_matrix(2, monday)))


if __name__ == "__main__":
    main()
