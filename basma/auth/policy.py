"""
Visibility and mutation rules.

Every page asks these functions instead of re-checking roles itself. They
are pure: they look only at the Actor and the item passed in, never at the
request or the database. `visible_posts_clause` is the single exception, it
expresses `can_view_post` as a SQL filter so listings are filtered in the
query; the two must stay in agreement.
"""
from sqlalchemy import and_, false, or_, true

from ..constants import MEMBERSHIP_ADMIN_ROLES, PostFlow, Visibility
from ..exceptions import PermissionDeniedError


def audience_matches(actor, audience_tag):
    """
    Shared committee rule for posts and meetings.

    No tag means everyone. Elevated roles see every tag. Anyone else needs a
    committee equal to the tag; having no committee never matches.
    """
    if audience_tag is None:
        return True
    if actor.is_elevated:
        return True
    return audience_tag in actor.committees


def can_view_post(actor, post):
    if post.visibility == Visibility.PUBLIC:
        return True
    if not actor.is_authenticated:
        return False
    if post.visibility == Visibility.INTERNAL_ALL:
        return True
    if post.visibility == Visibility.COMMITTEE_ONLY:
        # A committee-only post without a tag is malformed; only elevated roles see it
        if post.committee_tag is None:
            return actor.is_elevated
        return audience_matches(actor, post.committee_tag)
    if post.visibility == Visibility.ADMIN_ONLY:
        return actor.is_elevated
    return False


def can_view_meeting(actor, meeting):
    return audience_matches(actor, meeting.target_audience)


def can_create_post(actor, flow=PostFlow.BLOG):
    """
    The feed quick-post excludes embesa; the blog CMS does not.
    The two surfaces write the same Post entity.
    """
    if flow == PostFlow.FEED:
        return actor.can_add_feed_post
    return actor.is_elevated


def can_mutate_post(actor, post):
    return actor.is_elevated


def can_manage_meeting(actor, meeting=None):
    return actor.is_elevated


def can_view_attendees(actor, meeting):
    return actor.is_elevated and can_view_meeting(actor, meeting)


def can_edit_membership(actor, member=None):
    """Role, committee and status changes."""
    return actor.is_authenticated and actor.role in MEMBERSHIP_ADMIN_ROLES


def can_edit_profile(actor, member):
    """Members edit their own profile and avatar; no role grants this for others."""
    return actor.is_authenticated and actor.member_id == member.id


def can_grant_points(actor):
    return actor.is_elevated


def can_view_points_history(actor, member):
    return actor.is_elevated or (actor.is_authenticated and actor.member_id == member.id)


def require(allowed, message=None):
    """Raises PermissionDeniedError unless allowed is truthy."""
    if not allowed:
        if message:
            raise PermissionDeniedError(message)
        raise PermissionDeniedError()


def filter_visible_posts(actor, posts):
    return [p for p in posts if can_view_post(actor, p)]


def filter_visible_meetings(actor, meetings):
    return [m for m in meetings if can_view_meeting(actor, m)]


def visible_posts_clause(actor):
    """SQL form of can_view_post for Post queries."""
    from ..models import Post

    if not actor.is_authenticated:
        return Post.visibility == Visibility.PUBLIC
    if actor.is_elevated:
        return true()

    committee_clause = false()
    if actor.committees:
        committee_clause = and_(
            Post.visibility == Visibility.COMMITTEE_ONLY,
            Post.committee_tag.in_(sorted(actor.committees))
        )
    return or_(
        Post.visibility.in_([Visibility.PUBLIC, Visibility.INTERNAL_ALL]),
        committee_clause
    )


def visible_meetings_clause(actor):
    """SQL form of can_view_meeting for Meeting queries."""
    from ..models import Meeting

    if actor.is_elevated:
        return true()
    if not actor.committees:
        return Meeting.target_audience.is_(None)
    return or_(
        Meeting.target_audience.is_(None),
        Meeting.target_audience.in_(sorted(actor.committees))
    )
