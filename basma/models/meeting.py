"""Meeting (event) and RSVP models."""
from .base import db
from ..constants import Committee, MeetingType, RsvpStatus
from ..utils import utcnow, isoformat


class Meeting(db.Model):
    __tablename__ = 'events'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    date = db.Column(db.DateTime, nullable=False, index=True)
    type = db.Column(db.Enum(*MeetingType.ALL, name='event_type'),
                     default=MeetingType.ONLINE, nullable=False)
    # URL when online, street address when presential
    location = db.Column(db.String(1024), nullable=True)
    created_by = db.Column(db.Integer, db.ForeignKey('members.id', ondelete='SET NULL'), nullable=True)
    # NULL means every member may see the meeting
    target_audience = db.Column(db.Enum(*Committee.ALL, name='committee_type'), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    creator = db.relationship('Member', foreign_keys=[created_by])
    attendances = db.relationship('MeetingAttendance', back_populates='meeting',
                                  cascade='all, delete-orphan', lazy='dynamic')

    def __repr__(self):
        return f'<Meeting {self.id}: {self.title}>'

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'date': isoformat(self.date),
            'type': self.type,
            'location': self.location,
            'created_by': self.created_by,
            'target_audience': self.target_audience,
            'created_at': isoformat(self.created_at),
        }


class MeetingAttendance(db.Model):
    __tablename__ = 'meeting_attendance'

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey('events.id', ondelete='CASCADE'), nullable=False)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id', ondelete='CASCADE'), nullable=False)
    status = db.Column(db.Enum(*RsvpStatus.ALL, name='rsvp_status'), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    meeting = db.relationship('Meeting', back_populates='attendances')
    member = db.relationship('Member', back_populates='attendances')

    __table_args__ = (
        db.UniqueConstraint('event_id', 'member_id', name='uq_meeting_attendance'),
        db.Index('ix_meeting_attendance_event', 'event_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'event_id': self.event_id,
            'member_id': self.member_id,
            'status': self.status,
            'full_name': self.member.full_name if self.member else None,
            'avatar_url': self.member.avatar_url if self.member else None,
        }
