from models.help_request import HelpRequest, ACTIVE_STATUSES
from scheduling.catalog import slot_order


def _active_on(appointment_date):
    return HelpRequest.query.filter(
        HelpRequest.wants_appointment.is_(True),
        HelpRequest.appointment_date == appointment_date,
        HelpRequest.status.in_(ACTIVE_STATUSES),
    )


def taken_slots(appointment_date, exclude_id=None) -> list:
    """
    Slots already held by active requests on ``appointment_date``.

    ``exclude_id`` drops that request from the result whatever its status, so a
    user rescheduling still sees their own slot as selectable. Advisory only:
    the unique index on the requests table is what actually prevents double booking.
    """
    q = _active_on(appointment_date).with_entities(HelpRequest.appointment_time_slot)
    if exclude_id:
        q = q.filter(HelpRequest.id != exclude_id)

    taken = {slot for (slot,) in q.all() if slot}
    return sorted(taken, key=lambda s: (slot_order(s), s))


def taken_slots_for_token(appointment_date, token=None) -> list:
    exclude_id = None
    if token:
        row = (
            HelpRequest.query
            .with_entities(HelpRequest.id)
            .filter_by(reschedule_token=token)
            .first()
        )
        if row:
            exclude_id = row.id
    return taken_slots(appointment_date, exclude_id=exclude_id)


def is_slot_taken(appointment_date, slot, exclude_id=None) -> bool:
    q = _active_on(appointment_date).filter(HelpRequest.appointment_time_slot == slot)
    if exclude_id:
        q = q.filter(HelpRequest.id != exclude_id)
    return q.with_entities(HelpRequest.id).limit(1).first() is not None
