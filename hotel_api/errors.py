"""Error types raised by the API and the JSON handlers that render them."""
import logging

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import MethodNotAllowed, NotFound as RouteNotFound

logger = logging.getLogger(__name__)


class HotelAPIError(Exception):
    """Base exception for all errors surfaced to the caller."""
    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'error': self.message}


class ValidationError(HotelAPIError):
    """Raised when a request body or query parameter is malformed."""
    status_code = 400


class Forbidden(HotelAPIError):
    """Raised on role or ownership mismatch."""
    status_code = 403


class NotFound(HotelAPIError):
    status_code = 404


class BookingConflict(HotelAPIError):
    """Raised when a requested night is already held for the room."""
    status_code = 409

    def __init__(self, message, day=None):
        super().__init__(message)
        self.day = day

    def to_dict(self):
        data = super().to_dict()
        if self.day is not None:
            data['date'] = self.day.isoformat()
        return data


class DuplicateBooking(BookingConflict):
    """Raised when the same user already holds the same room and date."""
    status_code = 400


def register_error_handlers(app):
    from hotel_api import db

    @app.errorhandler(HotelAPIError)
    def handle_api_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(RouteNotFound)
    def handle_not_found(error):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(MethodNotAllowed)
    def handle_method_not_allowed(error):
        return jsonify({'error': 'Method not allowed'}), 405

    @app.errorhandler(SQLAlchemyError)
    def handle_store_error(error):
        db.session.rollback()
        logger.exception('Unhandled database error')
        return jsonify({'error': 'Internal server error'}), 500
