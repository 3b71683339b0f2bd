from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from .. import db
from ..models import Post, PostLike, PostComment, MeetingAttendance
from ..auth import policy
from ..constants import RsvpStatus
from ..exceptions import NotFoundError, ValidationError
from .persistence import commit


def rsvp_transition(current, requested):
    """
    RSVP toggle: re-sending the current status clears it, anything else replaces it.

    Args:
        current: Current RsvpStatus value, or None when there is no RSVP.
        requested: Requested RsvpStatus value, or None.

    Returns:
        The resulting status, None meaning no RSVP.
    """
    if current == requested:
        return None
    return requested


class EngagementService:
    """Likes, comments and RSVPs, plus the counts shown next to each item."""

    @staticmethod
    def summary(post, actor):
        """
        Returns:
            dict: like_count, comment_count, viewer_has_liked for one post.
        """
        like_count = db.session.query(func.count(PostLike.id)).filter(
            PostLike.post_id == post.id).scalar() or 0
        comment_count = db.session.query(func.count(PostComment.id)).filter(
            PostComment.post_id == post.id).scalar() or 0
        viewer_has_liked = False
        if actor.is_authenticated:
            viewer_has_liked = db.session.query(PostLike.id).filter_by(
                post_id=post.id, member_id=actor.member_id).first() is not None
        return {
            'like_count': like_count,
            'comment_count': comment_count,
            'viewer_has_liked': viewer_has_liked,
        }

    @staticmethod
    def summaries(posts, actor):
        """
        Counts for a page of posts with one grouped query per counter.

        Returns:
            dict: post id -> summary dict (same shape as `summary`).
        """
        post_ids = [p.id for p in posts]
        if not post_ids:
            return {}

        like_counts = dict(
            db.session.query(PostLike.post_id, func.count(PostLike.id))
            .filter(PostLike.post_id.in_(post_ids))
            .group_by(PostLike.post_id)
            .all()
        )
        comment_counts = dict(
            db.session.query(PostComment.post_id, func.count(PostComment.id))
            .filter(PostComment.post_id.in_(post_ids))
            .group_by(PostComment.post_id)
            .all()
        )
        liked = set()
        if actor.is_authenticated:
            liked = {
                row.post_id for row in db.session.query(PostLike.post_id).filter(
                    PostLike.post_id.in_(post_ids),
                    PostLike.member_id == actor.member_id
                )
            }

        return {
            pid: {
                'like_count': like_counts.get(pid, 0),
                'comment_count': comment_counts.get(pid, 0),
                'viewer_has_liked': pid in liked,
            }
            for pid in post_ids
        }

    @staticmethod
    def _visible_post(actor, post):
        if post is None or not policy.can_view_post(actor, post):
            raise NotFoundError('Post', post.id if post is not None else None)
        return post

    @staticmethod
    def toggle_like(actor, post):
        """
        Removes the actor's like if present, otherwise adds one.

        A concurrent toggle that inserted first trips the unique constraint;
        that insert is rolled back and the post is reported as liked.

        Returns:
            dict: fresh summary for the post.
        """
        policy.require(actor.is_authenticated, 'You must be signed in to like posts.')
        EngagementService._visible_post(actor, post)

        existing = PostLike.query.filter_by(post_id=post.id, member_id=actor.member_id).first()
        if existing:
            db.session.delete(existing)
            commit()
        else:
            db.session.add(PostLike(post_id=post.id, member_id=actor.member_id))
            try:
                commit()
            except IntegrityError:
                db.session.rollback()
                current_app.logger.info(
                    f"Duplicate like ignored for post {post.id} by member {actor.member_id}")

        return EngagementService.summary(post, actor)

    @staticmethod
    def add_comment(actor, post, content):
        policy.require(actor.is_authenticated, 'You must be signed in to comment.')
        EngagementService._visible_post(actor, post)

        content = (content or '').strip()
        if not content:
            raise ValidationError('Comment cannot be empty.', details={'content': 'required'})

        comment = PostComment(post_id=post.id, member_id=actor.member_id, content=content)
        db.session.add(comment)
        commit()
        return comment

    @staticmethod
    def comments_for(actor, post):
        """Comments oldest first."""
        EngagementService._visible_post(actor, post)
        return PostComment.query.filter_by(post_id=post.id).order_by(
            PostComment.created_at.asc(), PostComment.id.asc()).all()

    # --- Meetings -----------------------------------------------------

    @staticmethod
    def rsvp_status(actor, meeting):
        if not actor.is_authenticated:
            return None
        row = MeetingAttendance.query.filter_by(
            event_id=meeting.id, member_id=actor.member_id).first()
        return row.status if row else None

    @staticmethod
    def set_rsvp(actor, meeting, status):
        """
        Applies `rsvp_transition` to the actor's RSVP for a meeting.

        No RSVP -> insert. Same status -> delete. Different status -> update
        the existing row in place.

        Returns:
            dict: my_status plus fresh attendance counts.
        """
        policy.require(actor.is_authenticated, 'You must be signed in to RSVP.')
        if not policy.can_view_meeting(actor, meeting):
            raise NotFoundError('Meeting', meeting.id)
        if status is not None and status not in RsvpStatus.ALL:
            raise ValidationError('Invalid RSVP status.', details={'status': status})

        existing = MeetingAttendance.query.filter_by(
            event_id=meeting.id, member_id=actor.member_id).first()
        current = existing.status if existing else None
        new_status = rsvp_transition(current, status)

        if existing is None and new_status is not None:
            db.session.add(MeetingAttendance(
                event_id=meeting.id, member_id=actor.member_id, status=new_status))
        elif existing is not None and new_status is None:
            db.session.delete(existing)
        elif existing is not None:
            existing.status = new_status

        try:
            commit()
        except IntegrityError:
            # Another request inserted the row first; apply the change to that row
            db.session.rollback()
            existing = MeetingAttendance.query.filter_by(
                event_id=meeting.id, member_id=actor.member_id).first()
            if existing is not None and new_status is not None:
                existing.status = new_status
                commit()

        current_app.logger.info(
            f"RSVP for meeting {meeting.id} by member {actor.member_id}: {current} -> {new_status}")
        return {
            'my_status': new_status,
            'counts': EngagementService.attendance_counts(meeting),
        }

    @staticmethod
    def attendance_counts(meeting):
        rows = db.session.query(MeetingAttendance.status, func.count(MeetingAttendance.id)).filter(
            MeetingAttendance.event_id == meeting.id
        ).group_by(MeetingAttendance.status).all()
        counts = {status: 0 for status in RsvpStatus.ALL}
        for status, count in rows:
            counts[status] = count
        return counts

    @staticmethod
    def attendance_for(actor, meeting):
        """
        RSVPs grouped by status in display order, for elevated viewers.

        Returns:
            dict: status -> list of attendee dicts.
        """
        policy.require(policy.can_view_attendees(actor, meeting),
                       'Only officers can view the attendee list.')
        rows = MeetingAttendance.query.filter_by(event_id=meeting.id).order_by(
            MeetingAttendance.created_at.asc(), MeetingAttendance.id.asc()).all()
        grouped = {status: [] for status in RsvpStatus.ALL}
        for row in rows:
            grouped[row.status].append(row.to_dict())
        return grouped
