from flask import current_app
from sqlalchemy import or_

from .. import db
from ..models import Post
from ..auth import policy
from ..constants import Committee, PostFlow, UploadCategory, Visibility
from ..exceptions import NotFoundError, ValidationError
from ..storage import FileStorage, build_path, timestamped_filename, validate_image
from .persistence import commit


def normalize_visibility(visibility, committee_tag):
    """
    Validates a visibility / committee tag pair.

    Returns:
        tuple: (visibility, committee_tag) with the tag cleared for every
        visibility other than committee_only.

    Raises:
        ValidationError: unknown visibility, unknown committee, or a
            committee_only post without a tag.
    """
    visibility = visibility or Visibility.INTERNAL_ALL
    if visibility not in Visibility.ALL:
        raise ValidationError('Invalid visibility.', details={'visibility': visibility})

    if visibility != Visibility.COMMITTEE_ONLY:
        return visibility, None

    committee_tag = committee_tag or None
    if committee_tag is None:
        raise ValidationError('A committee is required for committee-only posts.',
                              details={'committee_tag': 'required'})
    if committee_tag not in Committee.ALL:
        raise ValidationError('Unknown committee.', details={'committee_tag': committee_tag})
    return visibility, committee_tag


class PostService:

    @staticmethod
    def _store_image(actor, image_file):
        data = validate_image(image_file)
        path = build_path(UploadCategory.POSTS, actor.member_id,
                          timestamped_filename(image_file.mimetype))
        return FileStorage().upload(path, data)

    @staticmethod
    def create_post(actor, title, content, visibility=None, committee_tag=None,
                    image_file=None, flow=PostFlow.BLOG):
        """
        Creates a post on behalf of actor.

        Args:
            flow: PostFlow.FEED for the dashboard quick-post (embesa excluded),
                PostFlow.BLOG for the admin CMS.
        """
        policy.require(policy.can_create_post(actor, flow), 'You are not allowed to publish posts.')

        title = (title or '').strip()
        content = (content or '').strip()
        errors = {}
        if not title:
            errors['title'] = 'required'
        if not content:
            errors['content'] = 'required'
        if errors:
            raise ValidationError('Title and content are required.', details=errors)

        visibility, committee_tag = normalize_visibility(visibility, committee_tag)

        image_url = None
        if image_file is not None and image_file.filename:
            image_url = PostService._store_image(actor, image_file)

        post = Post(
            author_id=actor.member_id,
            title=title,
            content=content,
            visibility=visibility,
            committee_tag=committee_tag,
            image_url=image_url,
        )
        db.session.add(post)
        commit()
        current_app.logger.info(
            f"Member {actor.member_id} created post {post.id} ({visibility}) via {flow}")
        return post

    @staticmethod
    def update_post(actor, post, title=None, content=None, visibility=None,
                    committee_tag=None, image_file=None, remove_image=False):
        """Edits a post. Fields left as None keep their value."""
        policy.require(policy.can_mutate_post(actor, post), 'You are not allowed to edit posts.')

        if title is not None:
            title = title.strip()
            if not title:
                raise ValidationError('Title is required.', details={'title': 'required'})
            post.title = title
        if content is not None:
            content = content.strip()
            if not content:
                raise ValidationError('Content is required.', details={'content': 'required'})
            post.content = content

        if visibility is not None or committee_tag is not None:
            new_visibility = visibility or post.visibility
            new_tag = committee_tag if committee_tag is not None else post.committee_tag
            post.visibility, post.committee_tag = normalize_visibility(new_visibility, new_tag)

        if image_file is not None and image_file.filename:
            post.image_url = PostService._store_image(actor, image_file)
        elif remove_image:
            post.image_url = None

        commit()
        current_app.logger.info(f"Member {actor.member_id} updated post {post.id}")
        return post

    @staticmethod
    def delete_post(actor, post):
        policy.require(policy.can_mutate_post(actor, post), 'You are not allowed to delete posts.')
        post_id = post.id
        db.session.delete(post)
        commit()
        current_app.logger.info(f"Member {actor.member_id} deleted post {post_id}")

    @staticmethod
    def get_visible(actor, post_id):
        """A post the actor may read; hidden and missing posts look the same."""
        post = db.session.get(Post, post_id)
        if post is None or not policy.can_view_post(actor, post):
            raise NotFoundError('Post', post_id)
        return post

    @staticmethod
    def get_public(post_id):
        post = Post.query.filter_by(id=post_id, visibility=Visibility.PUBLIC).first()
        if post is None:
            raise NotFoundError('Post', post_id)
        return post

    @staticmethod
    def visible_posts(actor, committee_scope=False, limit=None):
        """
        Posts the actor may read, newest first.

        Args:
            committee_scope: only posts tagged with one of the actor's committees.
        """
        query = Post.query.filter(policy.visible_posts_clause(actor))
        if committee_scope:
            if not actor.committees:
                return []
            query = query.filter(
                Post.visibility == Visibility.COMMITTEE_ONLY,
                Post.committee_tag.in_(sorted(actor.committees))
            )
        query = query.order_by(Post.created_at.desc(), Post.id.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def public_posts(limit=None):
        query = Post.query.filter(Post.visibility == Visibility.PUBLIC).order_by(
            Post.created_at.desc(), Post.id.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def search_posts(search=None, visibility=None):
        """Admin CMS listing: every post, filtered by text and visibility."""
        query = Post.query
        if search:
            pattern = f"%{search.strip().lower()}%"
            query = query.filter(or_(
                db.func.lower(Post.title).like(pattern),
                db.func.lower(Post.content).like(pattern)
            ))
        if visibility and visibility != 'all':
            if visibility not in Visibility.ALL:
                raise ValidationError('Invalid visibility filter.', details={'visibility': visibility})
            query = query.filter(Post.visibility == visibility)
        return query.order_by(Post.created_at.desc(), Post.id.desc()).all()

    @staticmethod
    def posts_by_author(member, limit=10):
        """Profile page listing: the author's public and club-wide posts."""
        return Post.query.filter(
            Post.author_id == member.id,
            Post.visibility.in_([Visibility.PUBLIC, Visibility.INTERNAL_ALL])
        ).order_by(Post.created_at.desc(), Post.id.desc()).limit(limit).all()
