from flask import Blueprint, jsonify, request
from flask_login import login_required

from .constants import Committee
from .exceptions import ValidationError
from .services.points_service import PointsService
from .utils import parse_limit

leaderboard_bp = Blueprint('leaderboard_bp', __name__)


@leaderboard_bp.route('/api/leaderboard')
@login_required
def leaderboard():
    committee = request.args.get('committee')
    if committee in (None, '', 'all'):
        committee = None
    elif committee not in Committee.ALL:
        raise ValidationError('Unknown committee.', details={'committee': committee})
    limit = parse_limit(request.args.get('limit'), None)
    return jsonify({
        'success': True,
        'leaderboard': PointsService.leaderboard(committee=committee, limit=limit),
    })
