from io import BytesIO

from flask import current_app
from PIL import Image, UnidentifiedImageError
from sqlalchemy import func, or_

from .. import db
from ..models import Member, CommitteeMembership, RoleAssignment
from ..auth import policy
from ..constants import Committee, MemberStatus, Role, UploadCategory
from ..exceptions import NotFoundError, ValidationError
from ..storage import FileStorage, build_path, validate_image
from ..utils import utcnow
from .engagement_service import EngagementService
from .persistence import commit, upsert
from .points_service import PointsService
from .post_service import PostService

AVATAR_SIZE = 300
AVATAR_MAX_PIXELS = 25_000_000


def square_avatar(data, size=AVATAR_SIZE, max_pixels=AVATAR_MAX_PIXELS):
    """
    Crops an image to a centred square and resizes it.

    Returns:
        bytes: WebP encoded image.

    Raises:
        ValidationError: data is not a readable image, or has more than
            max_pixels pixels.
    """
    try:
        img = Image.open(BytesIO(data))
        if img.width * img.height > max_pixels:
            raise ValidationError('Image dimensions are too large.', details={'avatar': 'too_large'})
        img.load()
    except Image.DecompressionBombError:
        raise ValidationError('Image dimensions are too large.', details={'avatar': 'too_large'})
    except (UnidentifiedImageError, OSError):
        raise ValidationError('Could not read image.', details={'avatar': 'invalid'})

    # Preserve transparency
    if img.mode not in ("RGB", "RGBA"):
        img = img.convert("RGBA")

    width, height = img.size
    if width > height:
        left = (width - height) / 2
        box = (left, 0, left + height, height)
    else:
        top = (height - width) / 2
        box = (0, top, width, top + width)

    img = img.crop(box).resize((size, size), Image.Resampling.LANCZOS)
    out = BytesIO()
    img.save(out, "WEBP", quality=80)
    return out.getvalue()


class MemberService:

    @staticmethod
    def get_member(member_id):
        member = db.session.get(Member, member_id) if member_id is not None else None
        if member is None:
            raise NotFoundError('Member', member_id)
        return member

    @staticmethod
    def directory(search=None, committee=None, status=None):
        """
        Members for the directory, ordered by name.

        Args:
            search: case-insensitive substring of the full name.
            committee: primary committee or any committee membership.
            status: one of MemberStatus values.
        """
        query = Member.query
        if search:
            query = query.filter(func.lower(Member.full_name).like(f"%{search.strip().lower()}%"))
        if committee and committee != 'all':
            if committee not in Committee.ALL:
                raise ValidationError('Unknown committee.', details={'committee': committee})
            in_membership = db.session.query(CommitteeMembership.member_id).filter(
                CommitteeMembership.committee == committee)
            query = query.filter(or_(Member.committee == committee, Member.id.in_(in_membership)))
        if status and status != 'all':
            if status not in MemberStatus.ALL:
                raise ValidationError('Unknown status.', details={'status': status})
            query = query.filter(Member.status == status)
        return query.order_by(Member.full_name.asc(), Member.id.asc()).all()

    @staticmethod
    def profile(actor, member):
        """
        Profile payload: member card, points history when the actor may see
        it, and the latest club-wide posts with their counts.
        """
        data = member.to_dict(include_email=actor.is_elevated or actor.member_id == member.id)

        if policy.can_view_points_history(actor, member):
            data['points_history'] = [e.to_dict() for e in PointsService.history_for(member)]
        else:
            data['points_history'] = None

        posts = PostService.posts_by_author(member)
        counts = EngagementService.summaries(posts, actor)
        data['posts'] = [dict(p.to_dict(), **counts[p.id]) for p in posts]
        return data

    @staticmethod
    def update_membership(actor, member, role=None, committees=None):
        """
        Sets a member's role and committee list in a single commit.

        Args:
            role: new Role value, or None to keep the current one.
            committees: full list of committees (replaces the existing set),
                or None to keep them.
        """
        policy.require(policy.can_edit_membership(actor, member),
                       'Only the bureau or admins can change roles and committees.')

        if role is not None and role not in Role.ALL:
            raise ValidationError('Unknown role.', details={'role': role})
        if committees is not None:
            unknown = [c for c in committees if c not in Committee.ALL]
            if unknown:
                raise ValidationError('Unknown committee.', details={'committees': unknown})
            committees = list(dict.fromkeys(committees))

        if role is not None:
            upsert(RoleAssignment, {'member_id': member.id},
                   {'role': role, 'assigned_by': actor.member_id, 'assigned_at': utcnow()})

        if committees is not None:
            for membership in list(member.committee_memberships):
                if membership.committee not in committees:
                    member.committee_memberships.remove(membership)
            existing = {m.committee for m in member.committee_memberships}
            for committee in committees:
                if committee not in existing:
                    member.committee_memberships.append(CommitteeMembership(committee=committee))
            if member.committee not in committees:
                member.committee = committees[0] if committees else None

        commit()
        db.session.refresh(member)
        PointsService.invalidate_leaderboard()
        current_app.logger.info(
            f"Member {actor.member_id} set role={member.role_name} "
            f"committees={member.committee_names} for member {member.id}")
        return member

    @staticmethod
    def update_status(actor, member, status):
        policy.require(policy.can_edit_membership(actor, member),
                       'Only the bureau or admins can change member status.')
        if status not in MemberStatus.ALL:
            raise ValidationError('Unknown status.', details={'status': status})
        member.status = status
        commit()
        PointsService.invalidate_leaderboard()
        current_app.logger.info(f"Member {actor.member_id} set status={status} for member {member.id}")
        return member

    @staticmethod
    def update_own_profile(actor, member, full_name=None, avatar_file=None):
        """Name and avatar changes on the actor's own profile."""
        policy.require(policy.can_edit_profile(actor, member), 'You can only edit your own profile.')

        if full_name is not None:
            full_name = full_name.strip()
            if not full_name:
                raise ValidationError('Full name is required.', details={'full_name': 'required'})
            member.full_name = full_name

        if avatar_file is not None and avatar_file.filename:
            data = square_avatar(validate_image(avatar_file))
            path = build_path(UploadCategory.AVATARS, member.id, 'avatar.webp')
            member.avatar_url = FileStorage().upload(path, data)

        commit()
        PointsService.invalidate_leaderboard()
        current_app.logger.info(f"Member {member.id} updated their profile")
        return member
