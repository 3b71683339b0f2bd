from flask import Blueprint, jsonify, request

from .auth.identity import resolve_actor
from .auth.permissions import elevated_required
from .constants import PostFlow
from .services.engagement_service import EngagementService
from .services.persistence import get_or_404
from .services.post_service import PostService
from .models import Post
from .utils import get_request_data

admin_blog_bp = Blueprint('admin_blog_bp', __name__)


def _truthy(value):
    return str(value).lower() in ('1', 'true', 'on', 'yes')


@admin_blog_bp.route('/api/admin/posts')
@elevated_required
def list_posts():
    """All posts with optional ?search= and ?visibility= filters."""
    actor = resolve_actor()
    posts = PostService.search_posts(
        search=request.args.get('search'),
        visibility=request.args.get('visibility'),
    )
    counts = EngagementService.summaries(posts, actor)
    return jsonify({
        'success': True,
        'posts': [dict(p.to_dict(), **counts[p.id]) for p in posts],
    })


@admin_blog_bp.route('/api/admin/posts', methods=['POST'])
@elevated_required
def create_post():
    data = get_request_data()
    post = PostService.create_post(
        resolve_actor(),
        title=data.get('title'),
        content=data.get('content'),
        visibility=data.get('visibility'),
        committee_tag=data.get('committee_tag'),
        image_file=request.files.get('image'),
        flow=PostFlow.BLOG,
    )
    return jsonify({'success': True, 'post': post.to_dict()}), 201


@admin_blog_bp.route('/api/admin/posts/<int:post_id>', methods=['PUT', 'PATCH', 'POST'])
@elevated_required
def update_post(post_id):
    post = get_or_404(Post, post_id, 'Post')
    data = get_request_data()
    post = PostService.update_post(
        resolve_actor(),
        post,
        title=data.get('title'),
        content=data.get('content'),
        visibility=data.get('visibility'),
        committee_tag=data.get('committee_tag'),
        image_file=request.files.get('image'),
        remove_image=_truthy(data.get('remove_image', False)),
    )
    return jsonify({'success': True, 'post': post.to_dict()})


@admin_blog_bp.route('/api/admin/posts/<int:post_id>', methods=['DELETE'])
@elevated_required
def delete_post(post_id):
    post = get_or_404(Post, post_id, 'Post')
    PostService.delete_post(resolve_actor(), post)
    return jsonify({'success': True})
