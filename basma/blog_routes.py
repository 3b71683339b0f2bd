from flask import Blueprint, jsonify, request

from .auth.identity import resolve_actor
from .services.engagement_service import EngagementService
from .services.post_service import PostService
from .utils import parse_limit

blog_bp = Blueprint('blog_bp', __name__)

BLOG_PAGE_SIZE = 50


@blog_bp.route('/api/blog')
def list_posts():
    """Public articles for the website blog; no login needed."""
    limit = parse_limit(request.args.get('limit'), BLOG_PAGE_SIZE, BLOG_PAGE_SIZE)
    posts = PostService.public_posts(limit=limit)
    return jsonify({'success': True, 'posts': [p.to_dict() for p in posts]})


@blog_bp.route('/api/blog/<int:post_id>')
def get_post(post_id):
    post = PostService.get_public(post_id)
    data = post.to_dict()
    data.update(EngagementService.summary(post, resolve_actor()))
    return jsonify({'success': True, 'post': data})
