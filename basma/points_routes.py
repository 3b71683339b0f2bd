from flask import Blueprint, jsonify, request
from flask_login import login_required

from .auth import policy
from .auth.identity import resolve_actor
from .auth.permissions import elevated_required
from .services.member_service import MemberService
from .services.points_service import PointsService
from .utils import get_request_data, parse_int, parse_limit

points_bp = Blueprint('points_bp', __name__)

RECENT_GRANTS_MAX = 100


@points_bp.route('/api/points', methods=['POST'])
@elevated_required
def grant_points():
    """Appends a ledger entry; the member's total follows in the same commit."""
    data = get_request_data()
    member = MemberService.get_member(parse_int(data.get('member_id')))
    entry = PointsService.grant_points(
        resolve_actor(),
        member,
        task_description=data.get('task_description'),
        complexity_score=data.get('complexity_score'),
        admin_comment=data.get('admin_comment'),
        date=data.get('date'),
    )
    return jsonify({
        'success': True,
        'entry': entry.to_dict(),
        'total_points': member.total_points,
    }), 201


@points_bp.route('/api/points')
@elevated_required
def recent_grants():
    limit = parse_limit(request.args.get('limit'), 20, RECENT_GRANTS_MAX)
    return jsonify({
        'success': True,
        'tiers': list(PointsService.point_tiers()),
        'entries': [e.to_dict() for e in PointsService.recent_grants(limit=limit)],
    })


@points_bp.route('/api/members/<int:member_id>/points')
@login_required
def member_history(member_id):
    actor = resolve_actor()
    member = MemberService.get_member(member_id)
    policy.require(policy.can_view_points_history(actor, member),
                   'You can only view your own points history.')
    return jsonify({
        'success': True,
        'total_points': member.total_points,
        'entries': [e.to_dict() for e in PointsService.history_for(member)],
    })
