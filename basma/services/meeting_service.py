from flask import current_app

from .. import db
from ..models import Meeting
from ..auth import policy
from ..constants import Committee, MeetingType
from ..exceptions import NotFoundError, ValidationError
from ..utils import parse_datetime, utcnow
from .persistence import commit


class MeetingService:

    @staticmethod
    def _clean(data, partial=False):
        """
        Validates meeting fields from a request payload.

        Args:
            partial: keys missing from data are left out instead of required.

        Returns:
            dict: column -> value, ready to assign on a Meeting.
        """
        values = {}
        errors = {}

        if 'title' in data or not partial:
            title = (data.get('title') or '').strip()
            if not title:
                errors['title'] = 'required'
            values['title'] = title

        if 'date' in data or not partial:
            try:
                when = parse_datetime(data.get('date'))
            except ValueError:
                when = None
                errors['date'] = 'invalid'
            if when is None and 'date' not in errors:
                errors['date'] = 'required'
            values['date'] = when

        if 'type' in data or not partial:
            meeting_type = data.get('type') or MeetingType.ONLINE
            if meeting_type not in MeetingType.ALL:
                errors['type'] = 'invalid'
            values['type'] = meeting_type

        if 'target_audience' in data or not partial:
            audience = data.get('target_audience') or None
            if audience is not None and audience not in Committee.ALL:
                errors['target_audience'] = 'invalid'
            values['target_audience'] = audience

        for key in ('description', 'location'):
            if key in data or not partial:
                values[key] = (data.get(key) or '').strip() or None

        if errors:
            raise ValidationError('Invalid meeting.', details=errors)
        return values

    @staticmethod
    def create_meeting(actor, data):
        policy.require(policy.can_manage_meeting(actor), 'Only officers can create meetings.')
        values = MeetingService._clean(data)
        meeting = Meeting(created_by=actor.member_id, **values)
        db.session.add(meeting)
        commit()
        current_app.logger.info(f"Member {actor.member_id} created meeting {meeting.id}")
        return meeting

    @staticmethod
    def update_meeting(actor, meeting, data):
        policy.require(policy.can_manage_meeting(actor, meeting), 'Only officers can edit meetings.')
        for key, value in MeetingService._clean(data, partial=True).items():
            setattr(meeting, key, value)
        commit()
        current_app.logger.info(f"Member {actor.member_id} updated meeting {meeting.id}")
        return meeting

    @staticmethod
    def delete_meeting(actor, meeting):
        policy.require(policy.can_manage_meeting(actor, meeting), 'Only officers can delete meetings.')
        meeting_id = meeting.id
        db.session.delete(meeting)
        commit()
        current_app.logger.info(f"Member {actor.member_id} deleted meeting {meeting_id}")

    @staticmethod
    def get_visible(actor, meeting_id):
        meeting = db.session.get(Meeting, meeting_id)
        if meeting is None or not policy.can_view_meeting(actor, meeting):
            raise NotFoundError('Meeting', meeting_id)
        return meeting

    @staticmethod
    def visible_meetings(actor, now=None):
        """
        Returns:
            tuple: (upcoming, past). Upcoming soonest first, past most recent first.
        """
        now = now or utcnow()
        base = Meeting.query.filter(policy.visible_meetings_clause(actor))
        upcoming = base.filter(Meeting.date >= now).order_by(
            Meeting.date.asc(), Meeting.id.asc()).all()
        past = base.filter(Meeting.date < now).order_by(
            Meeting.date.desc(), Meeting.id.desc()).all()
        return upcoming, past

    @staticmethod
    def has_new_meetings(actor, now=None):
        """True when a visible upcoming meeting was created inside NEW_MEETING_WINDOW."""
        now = now or utcnow()
        window = current_app.config['NEW_MEETING_WINDOW']
        return db.session.query(Meeting.id).filter(
            policy.visible_meetings_clause(actor),
            Meeting.date >= now,
            Meeting.created_at >= now - window
        ).first() is not None
