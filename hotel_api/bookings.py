import logging
from dataclasses import dataclass
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from hotel_api.errors import BookingConflict, DuplicateBooking, ValidationError
from hotel_api.models import BookedDate, Booking, Room

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stay:
    kind: str
    nights: tuple

    @classmethod
    def single(cls, day):
        _check_last_night(day)
        return cls('date', (day,))

    @classmethod
    def between(cls, check_in, check_out, max_nights=None):
        # [check_in, check_out): el dia de salida queda libre
        if check_out <= check_in:
            raise ValidationError('Check-out date must be after check-in date')
        count = (check_out - check_in).days
        _check_length(count, max_nights)
        return cls('range', tuple(check_in + timedelta(days=i) for i in range(count)))

    @classmethod
    def of(cls, days, max_nights=None):
        nights = tuple(sorted(set(days)))
        if not nights:
            raise ValidationError('At least one date is required')
        _check_length(len(nights), max_nights)
        _check_last_night(nights[-1])
        return cls('dates', nights)


def _check_length(count, max_nights):
    if max_nights is not None and count > max_nights:
        raise ValidationError(f'A booking cannot exceed {max_nights} nights')


def _check_last_night(day):
    # la fecha de salida (ultima noche + 1) debe ser representable
    if day >= date.max:
        raise ValidationError(f'Invalid date: {day.isoformat()} is out of range')


class BookingConflictChecker:
    def __init__(self, session):
        self.session = session

    def first_held(self, room_id, days, exclude_booking_id=None, email=None):
        query = self.session.query(BookedDate).filter(
            BookedDate.room_id == room_id,
            BookedDate.date.in_(days),
        )
        if exclude_booking_id is not None:
            query = query.filter(BookedDate.booking_id != exclude_booking_id)
        if email is not None:
            query = query.join(Booking, BookedDate.booking_id == Booking.id).filter(Booking.email == email)
        return query.order_by(BookedDate.date).first()

    def check(self, room_id, email, stay, exclude_booking_id=None):
        if stay.kind == 'date':
            day = stay.nights[0]
            if self.first_held(room_id, [day], exclude_booking_id, email=email):
                logger.info('Duplicate booking of room %s on %s by %s', room_id, day, email)
                raise DuplicateBooking('You already booked this room on this date', day)
            if self.first_held(room_id, [day], exclude_booking_id):
                logger.info('Room %s already booked on %s', room_id, day)
                raise BookingConflict('Room already booked on this date', day)
            return

        held = self.first_held(room_id, list(stay.nights), exclude_booking_id)
        if held is not None:
            logger.info('Room %s already booked on %s', room_id, held.date)
            raise BookingConflict(f'Room already booked on {held.date.isoformat()}', held.date)


def _nights_for(room_id, stay):
    return [BookedDate(room_id=room_id, date=day) for day in stay.nights]


def _commit(session):
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        logger.info('Booking rejected by the room/date unique constraint')
        raise BookingConflict('Room already booked on this date')


def book_room(session, room, email, stay):
    BookingConflictChecker(session).check(room.id, email, stay)

    booking = Booking(
        room_id=room.id,
        email=email,
        kind=stay.kind,
        price_per_night=room.price,
        total_price=room.price * len(stay.nights),
        dates=_nights_for(room.id, stay),
    )
    session.add(booking)
    _commit(session)

    logger.info('Booking %s created: room %s, %d night(s) for %s',
                booking.group_id, room.id, len(stay.nights), email)
    return booking


def reschedule_booking(session, booking, stay):
    BookingConflictChecker(session).check(booking.room_id, booking.email, stay, exclude_booking_id=booking.id)

    # borrar las noches viejas antes de insertar las nuevas (uq_room_date)
    booking.dates = []
    session.flush()

    booking.dates = _nights_for(booking.room_id, stay)
    booking.kind = stay.kind
    booking.total_price = booking.price_per_night * len(stay.nights)
    _commit(session)

    logger.info('Booking %s moved to %s..%s', booking.group_id, stay.nights[0], stay.nights[-1])
    return booking


def cancel_booking(session, booking):
    released = len(booking.dates)
    group_id = booking.group_id
    session.delete(booking)
    session.commit()
    logger.info('Booking %s cancelled, %d night(s) released', group_id, released)
    return released


def booked_dates(session, room_id):
    rows = (
        session.query(BookedDate.date)
        .filter(BookedDate.room_id == room_id)
        .order_by(BookedDate.date)
        .all()
    )
    return [row.date for row in rows]


def free_rooms(session, check_in, check_out):
    if check_out <= check_in:
        raise ValidationError('Check-out date must be after check-in date')

    held_room_ids = select(BookedDate.room_id).where(
        BookedDate.date >= check_in,
        BookedDate.date < check_out,
    )
    return session.query(Room).filter(~Room.id.in_(held_room_ids)).order_by(Room.id).all()
