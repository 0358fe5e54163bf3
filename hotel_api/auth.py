from functools import wraps

from flask import jsonify
from flask_jwt_extended import create_access_token, get_jwt_identity, verify_jwt_in_request
from sqlalchemy.exc import IntegrityError

from hotel_api import db
from hotel_api.errors import Forbidden
from hotel_api.models import Role, User


def register_jwt_handlers(jwt):
    @jwt.unauthorized_loader
    def missing_token(reason):
        return jsonify({'error': 'Unauthorized'}), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify({'error': 'Forbidden'}), 403

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify({'error': 'Forbidden'}), 403


def issue_token(email, name=None, photo=None):
    """Return (token, user), creating the user with role 'user' on first sight."""
    user = User.query.filter_by(email=email).first()
    if not user:
        user = User(email=email, name=name, photo=photo, role=Role.USER)
        db.session.add(user)
        try:
            db.session.commit()
        except IntegrityError:
            # another request created it first
            db.session.rollback()
            user = User.query.filter_by(email=email).one()

    token = create_access_token(identity=user.email, additional_claims={'role': user.role.value})
    return token, user


def current_email():
    return get_jwt_identity()


def ensure_self(email):
    if email != current_email():
        raise Forbidden('Forbidden Access')


def admin_required(fn):
    """Require a valid token whose user is stored with the admin role."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        user = User.query.filter_by(email=current_email()).first()
        if not user or not user.is_admin:
            raise Forbidden('Admin access required')
        return fn(*args, **kwargs)
    return wrapper
