from flask import Blueprint, jsonify
from flask_login import login_required

from .auth.identity import resolve_actor
from .auth.permissions import elevated_required
from .services.engagement_service import EngagementService
from .services.meeting_service import MeetingService
from .utils import get_request_data

meetings_bp = Blueprint('meetings_bp', __name__)


def serialize_meeting(meeting, actor):
    data = meeting.to_dict()
    data['counts'] = EngagementService.attendance_counts(meeting)
    data['my_status'] = EngagementService.rsvp_status(actor, meeting)
    return data


@meetings_bp.route('/api/meetings')
@login_required
def list_meetings():
    actor = resolve_actor()
    upcoming, past = MeetingService.visible_meetings(actor)
    return jsonify({
        'success': True,
        'can_manage': actor.is_elevated,
        'upcoming': [serialize_meeting(m, actor) for m in upcoming],
        'past': [serialize_meeting(m, actor) for m in past],
    })


@meetings_bp.route('/api/meetings/notifications')
@login_required
def notifications():
    return jsonify({'success': True, 'has_new_meetings': MeetingService.has_new_meetings(resolve_actor())})


@meetings_bp.route('/api/meetings/<int:meeting_id>')
@login_required
def get_meeting(meeting_id):
    actor = resolve_actor()
    meeting = MeetingService.get_visible(actor, meeting_id)
    return jsonify({'success': True, 'meeting': serialize_meeting(meeting, actor)})


@meetings_bp.route('/api/meetings', methods=['POST'])
@elevated_required
def create_meeting():
    actor = resolve_actor()
    meeting = MeetingService.create_meeting(actor, get_request_data())
    return jsonify({'success': True, 'meeting': serialize_meeting(meeting, actor)}), 201


@meetings_bp.route('/api/meetings/<int:meeting_id>', methods=['PUT', 'PATCH'])
@elevated_required
def update_meeting(meeting_id):
    actor = resolve_actor()
    meeting = MeetingService.get_visible(actor, meeting_id)
    meeting = MeetingService.update_meeting(actor, meeting, get_request_data())
    return jsonify({'success': True, 'meeting': serialize_meeting(meeting, actor)})


@meetings_bp.route('/api/meetings/<int:meeting_id>', methods=['DELETE'])
@elevated_required
def delete_meeting(meeting_id):
    actor = resolve_actor()
    meeting = MeetingService.get_visible(actor, meeting_id)
    MeetingService.delete_meeting(actor, meeting)
    return jsonify({'success': True})


@meetings_bp.route('/api/meetings/<int:meeting_id>/rsvp', methods=['POST'])
@login_required
def rsvp(meeting_id):
    """Sending the current status again clears the RSVP."""
    actor = resolve_actor()
    meeting = MeetingService.get_visible(actor, meeting_id)
    result = EngagementService.set_rsvp(actor, meeting, get_request_data().get('status'))
    return jsonify({'success': True, **result})


@meetings_bp.route('/api/meetings/<int:meeting_id>/attendees')
@elevated_required
def attendees(meeting_id):
    actor = resolve_actor()
    meeting = MeetingService.get_visible(actor, meeting_id)
    return jsonify({'success': True, 'attendees': EngagementService.attendance_for(actor, meeting)})
