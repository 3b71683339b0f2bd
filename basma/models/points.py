"""Append-only points ledger."""
from .base import db
from ..utils import utcnow, isoformat


class PointsLogEntry(db.Model):
    """One immutable grant of points to a member for a described task."""
    __tablename__ = 'points_log'

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id', ondelete='CASCADE'),
                          nullable=False, index=True)
    task_description = db.Column(db.String(500), nullable=False)
    complexity_score = db.Column(db.Integer, nullable=False)
    date = db.Column(db.Date, nullable=False)
    admin_comment = db.Column(db.Text, nullable=True)
    created_by = db.Column(db.Integer, db.ForeignKey('members.id', ondelete='SET NULL'), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    member = db.relationship('Member', foreign_keys=[member_id], back_populates='points_entries')
    granted_by = db.relationship('Member', foreign_keys=[created_by])

    __table_args__ = (
        db.CheckConstraint('complexity_score > 0', name='complexity_score_positive'),
        db.Index('ix_points_log_member_date', 'member_id', 'date'),
    )

    def __repr__(self):
        return f'<PointsLogEntry member_id={self.member_id} score={self.complexity_score}>'

    def to_dict(self):
        return {
            'id': self.id,
            'member_id': self.member_id,
            'member_name': self.member.full_name if self.member else None,
            'task_description': self.task_description,
            'complexity_score': self.complexity_score,
            'date': isoformat(self.date),
            'admin_comment': self.admin_comment,
            'created_by': self.created_by,
            'created_at': isoformat(self.created_at),
        }
