import io
import struct
import zlib

import pytest
from PIL import Image
from werkzeug.datastructures import FileStorage as UploadedFile

from basma import db
from basma.auth.identity import Actor
from basma.constants import Committee, MemberStatus, Role, Visibility
from basma.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from basma.models import CommitteeMembership, Member, RoleAssignment
from basma.services.member_service import MemberService, square_avatar
from basma.services.points_service import PointsService
from basma.services.post_service import PostService
from basma.storage import FileStorage


def image_bytes(width, height, fmt='PNG'):
    out = io.BytesIO()
    Image.new('RGB', (width, height), (200, 30, 30)).save(out, fmt)
    return out.getvalue()


def png_header(width, height):
    """A PNG that declares the given size but carries no pixel data."""
    def chunk(kind, body):
        return struct.pack('>I', len(body)) + kind + body + struct.pack('>I', zlib.crc32(kind + body))
    ihdr = struct.pack('>IIBBBBB', width, height, 8, 2, 0, 0, 0)
    return b'\x89PNG\r\n\x1a\n' + chunk(b'IHDR', ihdr) + chunk(b'IEND', b'')


def test_square_avatar_crops_and_resizes():
    data = square_avatar(image_bytes(640, 200))
    img = Image.open(io.BytesIO(data))
    assert img.size == (300, 300)
    assert img.format == 'WEBP'


def test_square_avatar_rejects_garbage():
    with pytest.raises(ValidationError):
        square_avatar(b'not an image')


def test_square_avatar_rejects_huge_dimensions():
    data = image_bytes(400, 300)
    with pytest.raises(ValidationError) as excinfo:
        square_avatar(data, max_pixels=100_000)
    assert excinfo.value.details == {'avatar': 'too_large'}


def test_decompression_bomb_avatar_rejected(ctx, make_member):
    member = make_member()
    upload = UploadedFile(stream=io.BytesIO(png_header(20000, 20000)), filename='bomb.png',
                          content_type='image/png')

    with pytest.raises(ValidationError):
        MemberService.update_own_profile(Actor.from_member(member), member, avatar_file=upload)
    assert db.session.get(Member, member.id).avatar_url is None


def test_directory_search_and_filters(ctx, make_member):
    make_member(full_name='Salma Idrissi', committee=Committee.MEDIA)
    make_member(full_name='Youssef Alami', committee=Committee.EVENT,
                extra_committees=[Committee.MEDIA])
    make_member(full_name='Old Timer', status=MemberStatus.EMBESA)

    assert [m.full_name for m in MemberService.directory(search='salma')] == ['Salma Idrissi']
    assert [m.full_name for m in MemberService.directory(committee=Committee.MEDIA)] == [
        'Salma Idrissi', 'Youssef Alami']
    assert [m.full_name for m in MemberService.directory(status=MemberStatus.EMBESA)] == ['Old Timer']
    assert len(MemberService.directory(committee='all')) == 3
    with pytest.raises(ValidationError):
        MemberService.directory(committee='Marketing')


def test_get_member_not_found(ctx):
    with pytest.raises(NotFoundError):
        MemberService.get_member(999)
    with pytest.raises(NotFoundError):
        MemberService.get_member(None)


def test_profile_points_history_visibility(ctx, make_member):
    admin = make_member(role=Role.ADMIN)
    owner = make_member()
    stranger = make_member()
    PointsService.grant_points(Actor.from_member(admin), owner, 'Flyers', 2)

    own = MemberService.profile(Actor.from_member(owner), owner)
    assert [e['task_description'] for e in own['points_history']] == ['Flyers']
    assert own['email'] == owner.email

    seen_by_admin = MemberService.profile(Actor.from_member(admin), owner)
    assert len(seen_by_admin['points_history']) == 1

    seen_by_stranger = MemberService.profile(Actor.from_member(stranger), owner)
    assert seen_by_stranger['points_history'] is None
    assert 'email' not in seen_by_stranger


def test_profile_lists_club_wide_posts_with_counts(ctx, make_member):
    author = make_member(role=Role.RESPO, committee=Committee.MEDIA)
    actor = Actor.from_member(author)
    PostService.create_post(actor, 'Public', 'c', Visibility.PUBLIC)
    PostService.create_post(actor, 'Internal', 'c', Visibility.INTERNAL_ALL)
    PostService.create_post(actor, 'Secret', 'c', Visibility.ADMIN_ONLY)
    PostService.create_post(actor, 'Team', 'c', Visibility.COMMITTEE_ONLY, Committee.MEDIA)

    profile = MemberService.profile(actor, author)
    assert {p['title'] for p in profile['posts']} == {'Public', 'Internal'}
    assert all('like_count' in p and 'comment_count' in p for p in profile['posts'])


def test_update_role_and_committees_together(ctx, make_member):
    bureau = Actor.from_member(make_member(role=Role.BUREAU))
    member = make_member(committee=Committee.EVENT)

    MemberService.update_membership(bureau, member, role=Role.RESPO,
                                    committees=[Committee.MEDIA, Committee.TECHNIQUE])

    assert member.role_name == Role.RESPO
    assert member.role_assignment.assigned_by == bureau.member_id
    assert member.committee == Committee.MEDIA
    assert set(member.committee_names) == {Committee.MEDIA, Committee.TECHNIQUE}
    assert RoleAssignment.query.filter_by(member_id=member.id).count() == 1


def test_clearing_committees(ctx, make_member):
    admin = Actor.from_member(make_member(role=Role.ADMIN))
    member = make_member(committee=Committee.EVENT, extra_committees=[Committee.MEDIA])

    MemberService.update_membership(admin, member, committees=[])

    assert member.committee is None
    assert member.committee_names == []
    assert CommitteeMembership.query.filter_by(member_id=member.id).count() == 0


@pytest.mark.parametrize('role', [Role.RESPO, Role.EMBESA, Role.MEMBER])
def test_only_bureau_and_admin_edit_membership(ctx, make_member, role):
    editor = Actor.from_member(make_member(role=role))
    member = make_member()

    with pytest.raises(PermissionDeniedError):
        MemberService.update_membership(editor, member, role=Role.ADMIN)
    with pytest.raises(PermissionDeniedError):
        MemberService.update_status(editor, member, MemberStatus.BANNED)
    assert db.session.get(Member, member.id).role_name == Role.MEMBER


def test_invalid_membership_values_write_nothing(ctx, make_member):
    admin = Actor.from_member(make_member(role=Role.ADMIN))
    member = make_member(committee=Committee.EVENT)

    with pytest.raises(ValidationError):
        MemberService.update_membership(admin, member, role=Role.RESPO, committees=['Marketing'])
    db.session.rollback()
    refreshed = db.session.get(Member, member.id)
    assert refreshed.role_name == Role.MEMBER
    assert refreshed.committee == Committee.EVENT


def test_update_status(ctx, make_member):
    admin = Actor.from_member(make_member(role=Role.ADMIN))
    member = make_member()
    MemberService.update_status(admin, member, MemberStatus.BANNED)
    assert member.status == MemberStatus.BANNED
    assert member.is_active is False
    with pytest.raises(ValidationError):
        MemberService.update_status(admin, member, 'retired')


def test_update_own_profile_with_avatar(ctx, make_member):
    member = make_member(full_name='Before')
    upload = UploadedFile(stream=io.BytesIO(image_bytes(120, 80)), filename='me.png',
                          content_type='image/png')

    MemberService.update_own_profile(Actor.from_member(member), member,
                                     full_name='  After  ', avatar_file=upload)

    assert member.full_name == 'After'
    assert member.avatar_url.endswith(f'/uploads/avatars/{member.id}/avatar.webp')
    assert FileStorage().exists(f'avatars/{member.id}/avatar.webp')


def test_cannot_edit_someone_elses_profile(ctx, make_member):
    admin = Actor.from_member(make_member(role=Role.ADMIN))
    member = make_member(full_name='Untouched')
    with pytest.raises(PermissionDeniedError):
        MemberService.update_own_profile(admin, member, full_name='Changed')
    assert member.full_name == 'Untouched'


def test_committee_move_refreshes_leaderboard(ctx, make_member):
    admin = Actor.from_member(make_member(role=Role.ADMIN))
    member = make_member(full_name='Mover', committee=Committee.EVENT)
    PointsService.grant_points(admin, member, 'Stand', 3)
    assert [row['id'] for row in PointsService.leaderboard(committee=Committee.EVENT)] == [member.id]
    assert PointsService.leaderboard(committee=Committee.MEDIA) == []

    MemberService.update_membership(admin, member, committees=[Committee.MEDIA])

    assert [row['id'] for row in PointsService.leaderboard(committee=Committee.MEDIA)] == [member.id]
    assert PointsService.leaderboard(committee=Committee.EVENT) == []


def test_profile_rename_refreshes_leaderboard(ctx, make_member):
    member = make_member(full_name='Old Name')
    assert [row['full_name'] for row in PointsService.leaderboard()] == ['Old Name']

    MemberService.update_own_profile(Actor.from_member(member), member, full_name='New Name')

    assert [row['full_name'] for row in PointsService.leaderboard()] == ['New Name']
