import re

from flask import current_app
from flask_login import login_user, logout_user
from sqlalchemy.exc import IntegrityError

from .. import db, cache
from ..models import Member, RoleAssignment
from ..constants import MemberStatus, Role
from ..exceptions import AuthenticationError, ValidationError
from .persistence import commit

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
MIN_PASSWORD_LENGTH = 8


def validate_password(password):
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f'Password must be at least {MIN_PASSWORD_LENGTH} characters long.',
            details={'password': 'too_short'})
    if len(password) > 128:
        raise ValidationError('Password too long.', details={'password': 'too_long'})


class AuthService:
    """Sign-up, sign-in and password reset on top of Flask-Login sessions."""

    @staticmethod
    def sign_up(email, password, full_name):
        """
        Creates a member account with the plain `member` role.

        Raises:
            ValidationError: bad input or the email is already registered.
        """
        email = (email or '').strip().lower()
        full_name = (full_name or '').strip()
        password = password or ''

        errors = {}
        if not EMAIL_RE.match(email) or len(email) > 120:
            errors['email'] = 'invalid'
        if not full_name:
            errors['full_name'] = 'required'
        if errors:
            raise ValidationError('Invalid sign-up details.', details=errors)
        validate_password(password)

        if Member.query.filter_by(email=email).first():
            raise ValidationError('An account with this email already exists.',
                                  details={'email': 'taken'})

        member = Member(email=email, full_name=full_name)
        member.set_password(password)
        member.role_assignment = RoleAssignment(role=Role.MEMBER)
        db.session.add(member)
        try:
            commit()
        except IntegrityError:
            raise ValidationError('An account with this email already exists.',
                                  details={'email': 'taken'})

        # New members appear on the leaderboard at zero points
        cache.clear()
        current_app.logger.info(f"New member signed up: {member.id}")
        return member

    @staticmethod
    def authenticate(email, password):
        """
        Returns:
            Member: the account matching the credentials.

        Raises:
            AuthenticationError: unknown email, wrong password or banned account.
        """
        email = (email or '').strip().lower()
        if not email or not password:
            raise AuthenticationError('Email and password are required.')

        member = Member.query.filter_by(email=email).first()
        if member is None or not member.check_password(password):
            current_app.logger.warning(f"Failed sign-in for {email}")
            raise AuthenticationError('Invalid email or password.')
        if member.status == MemberStatus.BANNED:
            current_app.logger.warning(f"Banned member {member.id} tried to sign in")
            raise AuthenticationError('Account is suspended.')
        return member

    @staticmethod
    def sign_in(email, password, remember=True):
        member = AuthService.authenticate(email, password)
        login_user(member, remember=remember)
        current_app.logger.info(f"Member {member.id} signed in")
        return member

    @staticmethod
    def sign_out():
        logout_user()

    @staticmethod
    def reset_password(token, password):
        """
        Raises:
            AuthenticationError: the token is invalid or expired.
        """
        member = Member.verify_reset_token(
            token, expires_sec=current_app.config.get('PASSWORD_RESET_MAX_AGE', 1800))
        if member is None:
            raise AuthenticationError('That is an invalid or expired token.')
        password = password or ''
        validate_password(password)
        member.set_password(password)
        commit()
        current_app.logger.info(f"Member {member.id} reset their password")
        return member
