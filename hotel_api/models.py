# hotel_api/models.py
import enum
import uuid
from datetime import datetime, timedelta, timezone

from hotel_api import db


def utcnow():
    return datetime.now(timezone.utc)


class Role(str, enum.Enum):
    USER = 'user'
    ADMIN = 'admin'


class User(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    name = db.Column(db.String(100))
    photo = db.Column(db.String(500))
    role = db.Column(
        db.Enum(Role, name='user_role', values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
        default=Role.USER,
    )
    created_at = db.Column(db.DateTime, default=utcnow)

    @property
    def is_admin(self):
        return self.role == Role.ADMIN


class Room(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    price = db.Column(db.Numeric(10, 2, asdecimal=False), nullable=False)
    rating = db.Column(db.Float, nullable=False, default=0)
    image = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, default=utcnow)

    bookings = db.relationship('Booking', backref='room', lazy=True, cascade='all, delete-orphan')
    reviews = db.relationship('Review', backref='room', lazy=True, cascade='all, delete-orphan')


class Booking(db.Model):
    """A booking group: one reservation holding one or more nights of a room."""
    id = db.Column(db.Integer, primary_key=True)
    group_id = db.Column(db.String(32), unique=True, nullable=False, default=lambda: uuid.uuid4().hex)
    room_id = db.Column(db.Integer, db.ForeignKey('room.id'), nullable=False)
    email = db.Column(db.String(120), nullable=False, index=True)
    kind = db.Column(db.Enum('date', 'range', 'dates', name='booking_kind'), nullable=False)
    price_per_night = db.Column(db.Numeric(10, 2, asdecimal=False), nullable=False)
    total_price = db.Column(db.Numeric(10, 2, asdecimal=False), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    dates = db.relationship(
        'BookedDate',
        backref='booking',
        lazy=True,
        cascade='all, delete-orphan',
        order_by='BookedDate.date',
    )

    @property
    def nights(self):
        return [booked.date for booked in self.dates]

    @property
    def check_in(self):
        return self.dates[0].date if self.dates else None

    @property
    def check_out(self):
        return self.dates[-1].date + timedelta(days=1) if self.dates else None


class BookedDate(db.Model):
    """One night of a room held by a booking. (room_id, date) is unique."""
    __tablename__ = 'booked_date'

    id = db.Column(db.Integer, primary_key=True)
    booking_id = db.Column(db.Integer, db.ForeignKey('booking.id', ondelete='CASCADE'), nullable=False)
    room_id = db.Column(db.Integer, db.ForeignKey('room.id'), nullable=False)
    date = db.Column(db.Date, nullable=False)

    __table_args__ = (db.UniqueConstraint('room_id', 'date', name='uq_room_date'),)


class Review(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.Integer, db.ForeignKey('room.id'), nullable=False)
    username = db.Column(db.String(100))
    user_email = db.Column(db.String(120), nullable=False)
    user_photo = db.Column(db.String(500))
    rating = db.Column(db.Integer, nullable=False)
    comment = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utcnow)
