"""Committee membership: a member may sit on several committees."""
from .base import db
from ..constants import Committee
from ..utils import utcnow


class CommitteeMembership(db.Model):
    __tablename__ = 'member_committees'

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id', ondelete='CASCADE'), nullable=False)
    committee = db.Column(db.Enum(*Committee.ALL, name='committee_type'), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    member = db.relationship('Member', back_populates='committee_memberships')

    __table_args__ = (
        db.UniqueConstraint('member_id', 'committee', name='uq_member_committee'),
        db.Index('ix_member_committees_member', 'member_id'),
    )

    def __repr__(self):
        return f'<CommitteeMembership member_id={self.member_id} committee={self.committee}>'
