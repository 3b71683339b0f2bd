from flask import current_app, jsonify, request, url_for
from flask_login import login_required, current_user
from flask_principal import Identity, AnonymousIdentity, identity_changed

from . import auth_bp  # Import the blueprint
from .email import send_reset_email
from .identity import resolve_actor
from ..models import Member
from ..services.auth_service import AuthService
from ..utils import get_request_data


def _is_safe_next(next_page):
    return bool(next_page) and next_page.startswith('/') and not next_page.startswith('//')


# Login route
@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    if request.method == 'GET':
        # Anonymous callers of protected endpoints land here
        if current_user.is_authenticated:
            return jsonify({'success': True, 'member': current_user.to_dict(include_email=True)})
        return jsonify({
            'success': False,
            'error': 'Authentication required.',
            'login_url': url_for('auth_bp.login'),
            'next': request.args.get('next'),
        }), 401

    data = get_request_data()
    email = str(data.get('email') or '')
    password = str(data.get('password') or '')
    if len(email) > 255 or len(password) > 128:
        return jsonify({'success': False, 'error': 'Input too long.'}), 400

    member = AuthService.sign_in(email, password)
    identity_changed.send(current_app._get_current_object(), identity=Identity(member.id))

    next_page = request.args.get('next')
    return jsonify({
        'success': True,
        'member': member.to_dict(include_email=True),
        'next': next_page if _is_safe_next(next_page) else None,
    })


@auth_bp.route('/signup', methods=['POST'])
def signup():
    data = get_request_data()
    member = AuthService.sign_up(data.get('email'), data.get('password'), data.get('full_name'))
    return jsonify({'success': True, 'member': member.to_dict(include_email=True)}), 201


# Logout route
@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    AuthService.sign_out()
    identity_changed.send(current_app._get_current_object(), identity=AnonymousIdentity())
    return jsonify({'success': True})


@auth_bp.route('/api/me')
def me():
    """The current actor, anonymous included."""
    return jsonify({'success': True, 'actor': resolve_actor().to_dict()})


@auth_bp.route('/reset_password', methods=['POST'])
def reset_request():
    data = get_request_data()
    email = (data.get('email') or '').strip().lower()
    member = Member.query.filter_by(email=email).first() if email else None
    if member:
        send_reset_email(member)
    # Same answer whether or not the address is registered
    return jsonify({
        'success': True,
        'message': 'If an account exists for that email, a reset link has been sent.',
    })


@auth_bp.route('/reset_password/<token>', methods=['POST'])
def reset_token(token):
    data = get_request_data()
    password = str(data.get('password') or '')
    if password != data.get('confirm_password', password):
        return jsonify({'success': False, 'error': 'The passwords do not match.'}), 400
    AuthService.reset_password(token, password)
    return jsonify({'success': True, 'message': 'Your password has been updated. Please log in.'})
