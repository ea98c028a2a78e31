"""Job (+ primary operation, + produced item) → CalendarEvent."""

import datetime
from typing import Optional, Tuple, Union

from jobcal.schemas.calendar import CalendarEvent
from jobcal.schemas.jobs import ItemToMake, Job, Operation

TIMED_DEFAULT_DURATION = datetime.timedelta(minutes=30)
ALL_DAY_DEFAULT_DURATION = datetime.timedelta(days=1)


def _text(value: object) -> str:
    return "" if value is None else str(value).strip()


def _quantity(qty: Union[int, float]) -> str:
    if isinstance(qty, float) and qty.is_integer():
        return str(int(qty))
    return str(qty)


def schedule_window(
    job: Job, operation: Optional[Operation] = None
) -> Tuple[Optional[datetime.datetime], Optional[datetime.datetime]]:
    """Start and end as scheduled upstream (operation first, then job); no defaults."""
    start = (operation.effective_start if operation else None) or job.effective_start
    end = (operation.effective_end if operation else None) or job.effective_end
    return start, end


def _summary(job: Job, op_name: str) -> str:
    number = _text(job.number)
    title = _text(job.name) or (f"Job #{number}" if number else "Scheduled Work")
    parts = [title, f"#{number}" if number and _text(job.name) else "", f"({op_name})" if op_name else ""]
    return " ".join(p for p in parts if p)


def to_event(
    job: Job,
    operation: Optional[Operation] = None,
    item: Optional[ItemToMake] = None,
    all_day: bool = True,
) -> CalendarEvent:
    """
    Build the calendar view of a job.  Pure; missing fields are simply
    left out.  ``start`` stays None when nothing schedulable is known —
    callers drop such events.
    """
    start, end = schedule_window(job, operation)
    if end is None and start is not None:
        end = start + (ALL_DAY_DEFAULT_DURATION if all_day else TIMED_DEFAULT_DURATION)
    if start is not None and end is not None and end < start:
        end = start

    op_name = _text(operation.name) if operation else ""
    equipment = _text(operation.scheduled_equipment_name) if operation else ""
    status = _text(job.status)
    sales_order = _text(job.sales_order_id)

    ref = item.item_reference if item else None
    item_name = (_text(ref.name) or _text(ref.number)) if ref else ""
    item_desc = _text(ref.description) if ref else ""
    qty = item.quantity_to_make if item else None

    lines = [
        f"Status: {status}" if status else "",
        f"Sales Order: {sales_order}" if sales_order else "",
        f"Equipment: {equipment}" if equipment else "",
        f"Operation: {op_name}" if op_name else "",
        f"Item: {item_name}" if item_name else "",
        f"Desc: {item_desc}" if item_desc else "",
        f"Qty: {_quantity(qty)}" if qty is not None else "",
        f"Job ID: {job.id}" if _text(job.id) else "",
    ]

    categories: list[str] = []
    for tag in (equipment, op_name, status):
        if tag and tag not in categories:
            categories.append(tag)

    return CalendarEvent(
        id=job.id,
        start=start,
        end=end,
        summary=_summary(job, op_name),
        location=equipment,
        description="\n".join(line for line in lines if line),
        categories=categories,
    )
