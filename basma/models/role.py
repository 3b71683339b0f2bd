"""Role assignment: exactly one role per member."""
from .base import db
from ..constants import Role
from ..utils import utcnow


class RoleAssignment(db.Model):
    """Links a member to their single application role, with audit information."""
    __tablename__ = 'member_roles'

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id', ondelete='CASCADE'),
                          nullable=False, unique=True)
    role = db.Column(db.Enum(*Role.ALL, name='app_role'), default=Role.MEMBER, nullable=False)
    assigned_at = db.Column(db.DateTime, default=utcnow)
    assigned_by = db.Column(db.Integer, db.ForeignKey('members.id', ondelete='SET NULL'), nullable=True)

    member = db.relationship('Member', foreign_keys=[member_id], back_populates='role_assignment')

    def __repr__(self):
        return f'<RoleAssignment member_id={self.member_id} role={self.role}>'
