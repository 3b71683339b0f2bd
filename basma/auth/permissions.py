"""Route guards built on Flask-Principal role needs."""
from functools import wraps
from flask import abort, redirect, url_for
from flask_principal import Permission as PrincipalPermission, RoleNeed
from flask_login import current_user

from ..constants import ELEVATED_ROLES, MEMBERSHIP_ADMIN_ROLES


def create_role_permission(*role_names):
    """Create a Flask-Principal Permission satisfied by ANY of the given roles."""
    return PrincipalPermission(*[RoleNeed(name) for name in role_names])


def role_required(*role_names):
    """
    Decorator to require one of the given roles for a route.

    Usage:
        @role_required('bureau', 'admin')
        def edit_member():
            ...
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                return redirect(url_for('auth_bp.login'))
            permission = create_role_permission(*role_names)
            if not permission.can():
                abort(403)
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def elevated_required(f):
    """Decorator for routes reserved to bureau, admin, respo and embesa."""
    return role_required(*sorted(ELEVATED_ROLES))(f)


def membership_admin_required(f):
    """Decorator for routes that change roles, committees or member status."""
    return role_required(*sorted(MEMBERSHIP_ADMIN_ROLES))(f)
