"""
Models package for the Basma club platform.

One module per entity group; everything is re-exported here so callers can
`from basma.models import Member, Post`.
"""
from .base import db

from .member import Member, AnonymousMember
from .role import RoleAssignment
from .committee import CommitteeMembership
from .post import Post, PostLike, PostComment
from .meeting import Meeting, MeetingAttendance
from .points import PointsLogEntry

# Import Flask-Login user loader
from .. import login_manager


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(Member, int(user_id))


login_manager.anonymous_user = AnonymousMember

__all__ = [
    'db',
    'Member',
    'AnonymousMember',
    'RoleAssignment',
    'CommitteeMembership',
    'Post',
    'PostLike',
    'PostComment',
    'Meeting',
    'MeetingAttendance',
    'PointsLogEntry',
    'load_user',
]
