"""Resolves the acting principal for policy and engagement calls."""
from flask_login import current_user

from ..constants import ELEVATED_ROLES, Role


class Actor:
    """
    The caller of an operation, passed explicitly into every policy and
    service call instead of being read from ambient request state.

    Attributes:
        member_id: Member primary key, None for anonymous visitors.
        role: One of constants.Role, None for anonymous visitors.
        committee: Primary committee or None.
        committees: Frozen set of every committee the member sits on.
    """

    __slots__ = ('member_id', 'full_name', 'avatar_url', 'committee', 'committees', 'role')

    def __init__(self, member_id=None, full_name=None, avatar_url=None,
                 committee=None, committees=(), role=None):
        self.member_id = member_id
        self.full_name = full_name
        self.avatar_url = avatar_url
        self.committee = committee
        committee_set = set(c for c in committees if c)
        if committee:
            committee_set.add(committee)
        self.committees = frozenset(committee_set)
        self.role = role

    def __repr__(self):
        if self.is_anonymous:
            return '<Actor anonymous>'
        return f'<Actor {self.member_id} role={self.role}>'

    @property
    def is_authenticated(self):
        return self.member_id is not None

    @property
    def is_anonymous(self):
        return self.member_id is None

    @property
    def is_elevated(self):
        return self.is_authenticated and self.role in ELEVATED_ROLES

    @property
    def can_add_feed_post(self):
        """Embesa reads like an elevated role but may not use the feed quick-post."""
        return self.is_elevated and self.role != Role.EMBESA

    def to_dict(self):
        return {
            'member_id': self.member_id,
            'full_name': self.full_name,
            'avatar_url': self.avatar_url,
            'committee': self.committee,
            'committees': sorted(self.committees),
            'role': self.role,
            'is_elevated': self.is_elevated,
            'can_add_feed_post': self.can_add_feed_post,
        }

    @classmethod
    def from_member(cls, member):
        return cls(
            member_id=member.id,
            full_name=member.full_name,
            avatar_url=member.avatar_url,
            committee=member.committee,
            committees=member.committee_names,
            role=member.role_name,
        )


ANONYMOUS = Actor()


def resolve_actor(member=None):
    """
    Builds the Actor for an explicit member, or for the logged-in user.

    Returns:
        Actor: ANONYMOUS when there is no authenticated session.
    """
    if member is not None:
        return Actor.from_member(member)
    if current_user and current_user.is_authenticated:
        return Actor.from_member(current_user)
    return ANONYMOUS
