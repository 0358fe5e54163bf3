import datetime

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required
from sqlalchemy import func

from hotel_api import db
from hotel_api.auth import admin_required, current_email, ensure_self, issue_token
from hotel_api.bookings import Stay, book_room, booked_dates, cancel_booking, free_rooms, reschedule_booking
from hotel_api.errors import Forbidden, NotFound, ValidationError
from hotel_api.models import BookedDate, Booking, Review, Role, Room, User

api = Blueprint('api', __name__)


def parse_date(value, field='date'):
    try:
        return datetime.datetime.fromisoformat(value.replace('Z', '')).date()
    except (AttributeError, TypeError, ValueError):
        raise ValidationError(f'Invalid {field}: expected YYYY-MM-DD')


def parse_id(value, field):
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError(f'Invalid {field}')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'Invalid {field}')


def parse_price(value, field='price'):
    if isinstance(value, bool):
        raise ValidationError(f'Invalid {field}')
    try:
        price = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f'Invalid {field}')
    if price < 0:
        raise ValidationError(f'{field} cannot be negative')
    return price


def parse_room_rating(value):
    rating = parse_price(value, 'rating')
    if rating > 5:
        raise ValidationError('rating must be between 0 and 5')
    return rating


def json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def get_room_or_404(room_id):
    room = db.session.get(Room, room_id)
    if not room:
        raise NotFound(f'Room {room_id} not found')
    return room


def get_own_booking(booking_id):
    booking = db.session.get(Booking, booking_id)
    if not booking:
        raise NotFound('Booking not found')
    if booking.email != current_email():
        raise Forbidden('You can only change your own bookings')
    return booking


def stay_from(data):
    """Build a Stay from whichever date form the body uses."""
    max_nights = current_app.config['MAX_BOOKING_NIGHTS']
    if 'dates' in data:
        if not isinstance(data['dates'], list):
            raise ValidationError('dates must be a list')
        return Stay.of([parse_date(d) for d in data['dates']], max_nights)
    if 'date' in data:
        return Stay.single(parse_date(data['date']))
    if 'checkIn' in data or 'checkOut' in data:
        return Stay.between(
            parse_date(data.get('checkIn'), 'checkIn'),
            parse_date(data.get('checkOut'), 'checkOut'),
            max_nights,
        )
    raise ValidationError('Provide date, dates or checkIn/checkOut')


def room_to_dict(room):
    return {
        'id': room.id,
        'name': room.name,
        'description': room.description,
        'price': room.price,
        'rating': room.rating,
        'image': room.image,
    }


def booking_to_dict(booking):
    nights = booking.nights
    return {
        'id': booking.id,
        'groupId': booking.group_id,
        'roomId': booking.room_id,
        'email': booking.email,
        'kind': booking.kind,
        'date': nights[0].isoformat() if booking.kind == 'date' else None,
        'dates': [night.isoformat() for night in nights],
        'checkIn': booking.check_in.isoformat(),
        'checkOut': booking.check_out.isoformat(),
        'pricePerNight': booking.price_per_night,
        'totalPrice': booking.total_price,
        'createdAt': booking.created_at.isoformat(),
    }


def review_to_dict(review):
    return {
        'id': review.id,
        'roomId': review.room_id,
        'username': review.username,
        'userEmail': review.user_email,
        'userPhoto': review.user_photo,
        'rating': review.rating,
        'comment': review.comment,
        'createdAt': review.created_at.isoformat(),
    }


def user_to_dict(user):
    return {
        'id': user.id,
        'email': user.email,
        'name': user.name,
        'photo': user.photo,
        'role': user.role.value,
    }


@api.route('/', methods=['GET'])
def health():
    return 'Hotel Booking Server is Running'


### RUTAS PARA AUTENTICACION ###

@api.route('/jwt', methods=['POST'])
def create_token():
    data = json_body()
    email = data.get('email')
    if not isinstance(email, str) or '@' not in email:
        raise ValidationError('A valid email is required')

    token, user = issue_token(email.strip(), data.get('name'), data.get('photo'))
    return jsonify({'token': token, 'role': user.role.value}), 200


### RUTAS PARA HABITACIONES ###

@api.route('/rooms', methods=['GET'])
def get_rooms():
    query = Room.query
    min_price = request.args.get('minPrice')
    max_price = request.args.get('maxPrice')

    if min_price is not None and max_price is not None:
        query = query.filter(
            Room.price >= parse_price(min_price, 'minPrice'),
            Room.price <= parse_price(max_price, 'maxPrice'),
        )

    return jsonify([room_to_dict(room) for room in query.order_by(Room.id).all()]), 200


@api.route('/rooms/featured/top-rated', methods=['GET'])
def get_top_rated_rooms():
    rooms = Room.query.order_by(Room.rating.desc(), Room.id).limit(6).all()
    return jsonify([room_to_dict(room) for room in rooms]), 200


@api.route('/rooms/available', methods=['GET'])
def get_available_rooms():
    check_in = parse_date(request.args.get('checkIn'), 'checkIn')
    check_out = parse_date(request.args.get('checkOut'), 'checkOut')

    rooms = free_rooms(db.session, check_in, check_out)
    return jsonify([room_to_dict(room) for room in rooms]), 200


@api.route('/rooms/<int:room_id>', methods=['GET'])
def get_room(room_id):
    return jsonify(room_to_dict(get_room_or_404(room_id))), 200


@api.route('/rooms', methods=['POST'])
@admin_required
def create_room():
    data = json_body()

    name = data.get('name')
    if not isinstance(name, str) or not name.strip():
        raise ValidationError('name is required')
    if 'price' not in data:
        raise ValidationError('price is required')

    new_room = Room(
        name=name.strip(),
        description=data.get('description'),
        price=parse_price(data['price']),
        rating=parse_room_rating(data.get('rating', 0)),
        image=data.get('image'),
    )
    db.session.add(new_room)
    db.session.commit()

    return jsonify(room_to_dict(new_room)), 201


@api.route('/rooms/<int:room_id>', methods=['PATCH'])
@admin_required
def update_room(room_id):
    data = json_body()
    room = get_room_or_404(room_id)

    if 'name' in data:
        if not isinstance(data['name'], str) or not data['name'].strip():
            raise ValidationError('name cannot be empty')
        room.name = data['name'].strip()

    if 'description' in data:
        room.description = data['description']

    if 'price' in data:
        room.price = parse_price(data['price'])

    if 'rating' in data:
        room.rating = parse_room_rating(data['rating'])

    if 'image' in data:
        room.image = data['image']

    db.session.commit()

    return jsonify(room_to_dict(room)), 200


@api.route('/rooms/<int:room_id>', methods=['DELETE'])
@admin_required
def delete_room(room_id):
    room = get_room_or_404(room_id)
    db.session.delete(room)
    db.session.commit()
    return jsonify({'message': 'Room deleted'}), 200


### RUTAS PARA RESERVAS ###

@api.route('/bookings', methods=['POST'])
@jwt_required()
def create_booking():
    data = json_body()
    room = get_room_or_404(parse_id(data.get('roomId'), 'roomId'))

    if 'dates' not in data and 'date' not in data:
        raise ValidationError('Provide date or dates')
    stay = stay_from(data)

    booking = book_room(db.session, room, current_email(), stay)
    return jsonify(booking_to_dict(booking)), 201


@api.route('/bookings/range', methods=['POST'])
@jwt_required()
def create_range_booking():
    data = json_body()
    room = get_room_or_404(parse_id(data.get('roomId'), 'roomId'))

    stay = Stay.between(
        parse_date(data.get('checkIn'), 'checkIn'),
        parse_date(data.get('checkOut'), 'checkOut'),
        current_app.config['MAX_BOOKING_NIGHTS'],
    )

    booking = book_room(db.session, room, current_email(), stay)
    return jsonify(booking_to_dict(booking)), 201


def bookings_for(email):
    bookings = Booking.query.filter_by(email=email).order_by(Booking.created_at, Booking.id).all()
    return jsonify([booking_to_dict(booking) for booking in bookings]), 200


@api.route('/bookings', methods=['GET'])
@jwt_required()
def get_user_bookings():
    email = request.args.get('email')
    if not email:
        raise ValidationError('email query parameter is required')
    ensure_self(email)
    return bookings_for(email)


@api.route('/bookings/user/<email>', methods=['GET'])
@jwt_required()
def get_user_bookings_by_email(email):
    ensure_self(email)
    return bookings_for(email)


@api.route('/bookings/check', methods=['GET'])
@jwt_required()
def check_user_booking():
    email = request.args.get('email')
    room_id = parse_id(request.args.get('roomId'), 'roomId')
    ensure_self(email)

    existing = Booking.query.filter_by(room_id=room_id, email=email).first()
    return jsonify({'hasBooked': existing is not None}), 200


@api.route('/bookings/room/<int:room_id>/dates', methods=['GET'])
def get_room_booked_dates(room_id):
    return jsonify([day.isoformat() for day in booked_dates(db.session, room_id)]), 200


@api.route('/bookings/room/<int:room_id>/date/<day>', methods=['GET'])
def get_room_bookings_on_date(room_id, day):
    day = parse_date(day)
    bookings = (
        Booking.query.join(BookedDate, BookedDate.booking_id == Booking.id)
        .filter(BookedDate.room_id == room_id, BookedDate.date == day)
        .all()
    )
    return jsonify([booking_to_dict(booking) for booking in bookings]), 200


@api.route('/bookings/<int:booking_id>', methods=['PATCH'])
@jwt_required()
def update_booking_dates(booking_id):
    data = json_body()
    booking = get_own_booking(booking_id)

    booking = reschedule_booking(db.session, booking, stay_from(data))
    return jsonify(booking_to_dict(booking)), 200


@api.route('/bookings/<int:booking_id>', methods=['DELETE'])
@jwt_required()
def delete_booking(booking_id):
    booking = get_own_booking(booking_id)

    released = cancel_booking(db.session, booking)
    return jsonify({'message': 'Booking cancelled successfully', 'releasedDates': released}), 200


### RUTAS PARA RESEÑAS ###

@api.route('/reviews', methods=['POST'])
@jwt_required()
def create_review():
    data = json_body()
    room = get_room_or_404(parse_id(data.get('roomId'), 'roomId'))

    rating = data.get('rating')
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError('rating must be an integer between 1 and 5')

    comment = data.get('comment')
    if comment is not None and not isinstance(comment, str):
        raise ValidationError('comment must be a string')

    author = User.query.filter_by(email=current_email()).first()
    review = Review(
        room_id=room.id,
        username=data.get('username') or (author.name if author else None),
        user_email=current_email(),
        user_photo=data.get('userPhoto') or (author.photo if author else None),
        rating=rating,
        comment=comment,
    )
    db.session.add(review)
    db.session.commit()

    return jsonify(review_to_dict(review)), 201


@api.route('/reviews', methods=['GET'])
def get_reviews():
    page = db.paginate(
        db.select(Review).order_by(Review.created_at.desc(), Review.id.desc()),
        page=request.args.get('page', 1, type=int),
        per_page=request.args.get('limit', current_app.config['REVIEWS_PER_PAGE'], type=int),
        max_per_page=100,
        error_out=False,
    )
    response = jsonify([review_to_dict(review) for review in page.items])
    response.headers['X-Total-Count'] = str(page.total)
    return response, 200


@api.route('/reviews/<int:room_id>', methods=['GET'])
def get_room_reviews(room_id):
    reviews = (
        Review.query.filter_by(room_id=room_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .all()
    )
    return jsonify([review_to_dict(review) for review in reviews]), 200


### RUTAS PARA USUARIOS ###

@api.route('/users/role', methods=['GET'])
@jwt_required()
def get_user_role():
    user = User.query.filter_by(email=current_email()).first()

    if not user:
        raise NotFound('User not found')

    return jsonify({'role': user.role.value}), 200


### RUTAS PARA ADMINISTRADORES ###

@api.route('/users', methods=['GET'])
@admin_required
def get_users():
    users = User.query.order_by(User.id).all()
    return jsonify([user_to_dict(user) for user in users]), 200


@api.route('/users/<int:user_id>/role', methods=['PATCH'])
@admin_required
def update_user_role(user_id):
    data = json_body()
    user = db.session.get(User, user_id)
    if not user:
        raise NotFound('User not found')

    try:
        user.role = Role(data.get('role'))
    except ValueError:
        raise ValidationError('role must be one of: user, admin')

    db.session.commit()
    return jsonify(user_to_dict(user)), 200


@api.route('/users/<int:user_id>', methods=['DELETE'])
@admin_required
def delete_user(user_id):
    user = db.session.get(User, user_id)
    if not user:
        raise NotFound('User not found')

    if user.email == current_email():
        raise Forbidden('Admins cannot delete their own account')

    db.session.delete(user)
    db.session.commit()
    return jsonify({'message': 'User deleted'}), 200


@api.route('/admin/stats', methods=['GET'])
@admin_required
def get_stats():
    revenue = db.session.query(func.coalesce(func.sum(Booking.total_price), 0)).scalar()

    nights_per_room = dict(
        db.session.query(BookedDate.room_id, func.count(BookedDate.id))
        .group_by(BookedDate.room_id)
        .all()
    )
    reviews_per_room = {
        room_id: (average, count)
        for room_id, average, count in db.session.query(
            Review.room_id, func.avg(Review.rating), func.count(Review.id)
        ).group_by(Review.room_id)
    }
    booking_rows = (
        db.session.query(
            Room.id,
            Room.name,
            func.count(Booking.id),
            func.coalesce(func.sum(Booking.total_price), 0),
        )
        .outerjoin(Booking, Booking.room_id == Room.id)
        .group_by(Room.id, Room.name)
        .order_by(Room.id)
        .all()
    )

    rooms = []
    for room_id, name, bookings, room_revenue in booking_rows:
        average, review_count = reviews_per_room.get(room_id, (None, 0))
        rooms.append({
            'roomId': room_id,
            'name': name,
            'bookings': bookings,
            'nights': nights_per_room.get(room_id, 0),
            'revenue': float(room_revenue),
            'averageRating': round(float(average), 2) if average is not None else None,
            'reviews': review_count,
        })

    return jsonify({
        'users': User.query.count(),
        'rooms': Room.query.count(),
        'bookings': Booking.query.count(),
        'bookedNights': BookedDate.query.count(),
        'reviews': Review.query.count(),
        'revenue': float(revenue),
        'perRoom': rooms,
    }), 200
