from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user

from .auth.identity import resolve_actor
from .auth.permissions import membership_admin_required
from .services.member_service import MemberService
from .utils import get_request_data

members_bp = Blueprint('members_bp', __name__)


def _list_field(data, key):
    """List values from a JSON array or repeated form fields; None when absent."""
    if key not in data:
        return None
    if hasattr(data, 'getlist'):
        return [v for v in data.getlist(key) if v]
    value = data.get(key)
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    return list(value)


@members_bp.route('/api/members')
@login_required
def directory():
    members = MemberService.directory(
        search=request.args.get('search'),
        committee=request.args.get('committee'),
        status=request.args.get('status'),
    )
    return jsonify({'success': True, 'members': [m.to_dict() for m in members]})


@members_bp.route('/api/members/<int:member_id>')
@login_required
def profile(member_id):
    member = MemberService.get_member(member_id)
    return jsonify({'success': True, 'member': MemberService.profile(resolve_actor(), member)})


@members_bp.route('/api/members/<int:member_id>/membership', methods=['PUT', 'POST'])
@membership_admin_required
def update_membership(member_id):
    """Role and committee list, saved together."""
    member = MemberService.get_member(member_id)
    data = get_request_data()
    member = MemberService.update_membership(
        resolve_actor(),
        member,
        role=data.get('role') or None,
        committees=_list_field(data, 'committees'),
    )
    return jsonify({'success': True, 'member': member.to_dict()})


@members_bp.route('/api/members/<int:member_id>/status', methods=['PUT', 'POST'])
@membership_admin_required
def update_status(member_id):
    member = MemberService.get_member(member_id)
    member = MemberService.update_status(resolve_actor(), member, get_request_data().get('status'))
    return jsonify({'success': True, 'member': member.to_dict()})


@members_bp.route('/api/profile')
@login_required
def own_profile():
    member = MemberService.get_member(current_user.id)
    return jsonify({'success': True, 'member': MemberService.profile(resolve_actor(), member)})


@members_bp.route('/api/profile', methods=['PUT', 'POST'])
@login_required
def update_own_profile():
    data = get_request_data()
    member = MemberService.update_own_profile(
        resolve_actor(),
        MemberService.get_member(current_user.id),
        full_name=data.get('full_name'),
        avatar_file=request.files.get('avatar'),
    )
    return jsonify({'success': True, 'member': member.to_dict(include_email=True)})
