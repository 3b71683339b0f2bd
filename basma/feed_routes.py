from flask import Blueprint, jsonify, request
from flask_login import login_required

from .auth.identity import resolve_actor
from .constants import PostFlow
from .services.engagement_service import EngagementService
from .services.points_service import PointsService
from .services.post_service import PostService
from .utils import get_request_data, parse_limit

feed_bp = Blueprint('feed_bp', __name__)

FEED_PAGE_SIZE = 50
LEADERBOARD_PREVIEW_SIZE = 5


def serialize_posts(posts, actor):
    counts = EngagementService.summaries(posts, actor)
    return [dict(p.to_dict(), **counts[p.id]) for p in posts]


@feed_bp.route('/api/feed')
@login_required
def get_feed():
    """Visible posts, newest first. ?scope=committee narrows to the actor's committees."""
    actor = resolve_actor()
    scope = request.args.get('scope', 'all')
    limit = parse_limit(request.args.get('limit'), FEED_PAGE_SIZE, FEED_PAGE_SIZE)
    posts = PostService.visible_posts(actor, committee_scope=(scope == 'committee'), limit=limit)
    return jsonify({
        'success': True,
        'scope': scope,
        'can_add_post': actor.can_add_feed_post,
        'posts': serialize_posts(posts, actor),
    })


@feed_bp.route('/api/feed/posts', methods=['POST'])
@login_required
def create_feed_post():
    actor = resolve_actor()
    data = get_request_data()
    post = PostService.create_post(
        actor,
        title=data.get('title'),
        content=data.get('content'),
        visibility=data.get('visibility'),
        committee_tag=data.get('committee_tag'),
        image_file=request.files.get('image'),
        flow=PostFlow.FEED,
    )
    return jsonify({'success': True, 'post': serialize_posts([post], actor)[0]}), 201


@feed_bp.route('/api/posts/<int:post_id>/like', methods=['POST'])
@login_required
def toggle_like(post_id):
    actor = resolve_actor()
    post = PostService.get_visible(actor, post_id)
    return jsonify({'success': True, **EngagementService.toggle_like(actor, post)})


@feed_bp.route('/api/posts/<int:post_id>/comments', methods=['GET'])
@login_required
def list_comments(post_id):
    actor = resolve_actor()
    post = PostService.get_visible(actor, post_id)
    comments = EngagementService.comments_for(actor, post)
    return jsonify({'success': True, 'comments': [c.to_dict() for c in comments]})


@feed_bp.route('/api/posts/<int:post_id>/comments', methods=['POST'])
@login_required
def add_comment(post_id):
    actor = resolve_actor()
    post = PostService.get_visible(actor, post_id)
    comment = EngagementService.add_comment(actor, post, get_request_data().get('content'))
    return jsonify({
        'success': True,
        'comment': comment.to_dict(),
        **EngagementService.summary(post, actor),
    }), 201


@feed_bp.route('/api/feed/leaderboard')
@login_required
def leaderboard_preview():
    """Sidebar top-5."""
    return jsonify({
        'success': True,
        'leaderboard': PointsService.leaderboard(limit=LEADERBOARD_PREVIEW_SIZE),
    })
