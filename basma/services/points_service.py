import re

from flask import current_app
from sqlalchemy import func

from .. import db, cache
from ..models import Member, PointsLogEntry
from ..auth import policy
from ..constants import POINT_TIERS
from ..exceptions import ValidationError
from ..utils import utcnow, parse_date
from .persistence import commit


LEADERBOARD_CACHE_PREFIX = 'leaderboard'


def leaderboard_cache_key(committee=None, limit=None):
    return f"{LEADERBOARD_CACHE_PREFIX}_{committee or 'all'}_{limit or 'full'}"


class PointsService:
    """Append-only points ledger and the per-member running total it feeds."""

    @staticmethod
    def point_tiers():
        return tuple(current_app.config.get('POINT_TIERS', POINT_TIERS))

    @staticmethod
    def validate_score(complexity_score):
        """
        Returns:
            int: the score, once it is a positive sanctioned tier.
        """
        if isinstance(complexity_score, bool):
            raise ValidationError('Complexity score must be a number.',
                                  details={'complexity_score': 'invalid'})
        if isinstance(complexity_score, float) and not complexity_score.is_integer():
            raise ValidationError('Complexity score must be a whole number.',
                                  details={'complexity_score': 'invalid'})
        if isinstance(complexity_score, str) and not re.fullmatch(r'\s*[+-]?\d+\s*', complexity_score):
            raise ValidationError('Complexity score must be a whole number.',
                                  details={'complexity_score': 'invalid'})
        try:
            score = int(complexity_score)
        except (TypeError, ValueError):
            raise ValidationError('Complexity score must be a number.',
                                  details={'complexity_score': 'invalid'})
        if score <= 0:
            raise ValidationError('Complexity score must be positive.',
                                  details={'complexity_score': 'must_be_positive'})
        tiers = PointsService.point_tiers()
        if score not in tiers:
            raise ValidationError(
                f"Complexity score must be one of {', '.join(str(t) for t in tiers)}.",
                details={'complexity_score': 'not_a_tier'})
        return score

    @staticmethod
    def grant_points(actor, member, task_description, complexity_score,
                     admin_comment=None, date=None):
        """
        Appends one ledger entry and adds its score to the member's total.

        The insert and the counter update share one transaction; the counter
        is incremented in SQL so concurrent grants do not overwrite each other.

        Raises:
            PermissionDeniedError: actor is not elevated. Nothing is written.
            ValidationError: empty task or score outside the sanctioned tiers.

        Returns:
            PointsLogEntry: the committed entry.
        """
        policy.require(policy.can_grant_points(actor), 'Only officers can grant points.')

        task_description = (task_description or '').strip()
        if not task_description:
            raise ValidationError('Task description is required.',
                                  details={'task_description': 'required'})
        score = PointsService.validate_score(complexity_score)
        try:
            entry_date = parse_date(date) or utcnow().date()
        except ValueError:
            raise ValidationError('Invalid date format.', details={'date': 'invalid'})

        admin_comment = (admin_comment or '').strip() or None

        entry = PointsLogEntry(
            member_id=member.id,
            task_description=task_description,
            complexity_score=score,
            date=entry_date,
            admin_comment=admin_comment,
            created_by=actor.member_id,
        )
        db.session.add(entry)
        db.session.query(Member).filter(Member.id == member.id).update(
            {Member.total_points: Member.total_points + score},
            synchronize_session=False
        )
        commit()
        db.session.refresh(member)

        PointsService.invalidate_leaderboard()
        current_app.logger.info(
            f"Member {actor.member_id} granted {score} points to member {member.id}: {task_description}")
        return entry

    @staticmethod
    def history_for(member, limit=None):
        """Ledger entries for one member, newest first."""
        if limit is None:
            limit = current_app.config.get('POINTS_HISTORY_LIMIT', 20)
        return PointsLogEntry.query.filter_by(member_id=member.id).order_by(
            PointsLogEntry.date.desc(),
            PointsLogEntry.created_at.desc(),
            PointsLogEntry.id.desc()
        ).limit(limit).all()

    @staticmethod
    def recent_grants(limit=20):
        """Latest entries across all members, for the admin points page."""
        return PointsLogEntry.query.order_by(
            PointsLogEntry.created_at.desc(),
            PointsLogEntry.id.desc()
        ).limit(limit).all()

    @staticmethod
    def ledger_total(member):
        return db.session.query(func.coalesce(func.sum(PointsLogEntry.complexity_score), 0)).filter(
            PointsLogEntry.member_id == member.id).scalar()

    @staticmethod
    def recalculate_totals():
        """
        Resets every member's total to the sum of their ledger entries.

        Returns:
            list: (member_id, old_total, new_total) for each corrected member.
        """
        sums = dict(
            db.session.query(PointsLogEntry.member_id, func.sum(PointsLogEntry.complexity_score))
            .group_by(PointsLogEntry.member_id)
            .all()
        )
        corrected = []
        for member in Member.query.order_by(Member.id).all():
            expected = int(sums.get(member.id) or 0)
            if member.total_points != expected:
                corrected.append((member.id, member.total_points, expected))
                member.total_points = expected
        if corrected:
            commit()
            PointsService.invalidate_leaderboard()
        return corrected

    @staticmethod
    def tasks_completed_counts(member_ids):
        if not member_ids:
            return {}
        return dict(
            db.session.query(PointsLogEntry.member_id, func.count(PointsLogEntry.id))
            .filter(PointsLogEntry.member_id.in_(member_ids))
            .group_by(PointsLogEntry.member_id)
            .all()
        )

    @staticmethod
    def leaderboard(committee=None, limit=None):
        """
        Members ranked by total points (ties broken by name), cached until the next grant or member change.

        Returns:
            list: dicts with rank, id, full_name, avatar_url, committee, points, tasks_completed.
        """
        key = leaderboard_cache_key(committee, limit)
        cached = cache.get(key)
        if cached is not None:
            return cached

        query = Member.query
        if committee:
            query = query.filter(Member.committee == committee)
        query = query.order_by(Member.total_points.desc(), Member.full_name.asc())
        if limit:
            query = query.limit(limit)
        members = query.all()

        tasks = PointsService.tasks_completed_counts([m.id for m in members])
        board = [
            {
                'rank': index + 1,
                'id': m.id,
                'full_name': m.full_name,
                'avatar_url': m.avatar_url,
                'committee': m.committee,
                'points': m.total_points,
                'tasks_completed': tasks.get(m.id, 0),
            }
            for index, m in enumerate(members)
        ]
        cache.set(key, board, timeout=current_app.config.get('LEADERBOARD_CACHE_TIMEOUT', 300))
        return board

    @staticmethod
    def invalidate_leaderboard():
        # The leaderboard is the only cached view
        cache.clear()
