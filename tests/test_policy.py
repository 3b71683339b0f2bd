"""Visibility and mutation rules, evaluated without a database."""
import pytest

from basma.auth import policy
from basma.auth.identity import ANONYMOUS, Actor
from basma.constants import Committee, PostFlow, Role, Visibility
from basma.exceptions import PermissionDeniedError
from basma.models import Meeting, Post


def actor(role=Role.MEMBER, committee=None, committees=(), member_id=1):
    return Actor(member_id=member_id, full_name='Test', committee=committee,
                 committees=committees, role=role)


def post(visibility, tag=None):
    return Post(title='t', content='c', visibility=visibility, committee_tag=tag)


MIXED_POSTS = [
    post(Visibility.PUBLIC),
    post(Visibility.INTERNAL_ALL),
    post(Visibility.COMMITTEE_ONLY, Committee.MEDIA),
    post(Visibility.COMMITTEE_ONLY, Committee.EVENT),
    post(Visibility.ADMIN_ONLY),
    post(Visibility.PUBLIC),
]


def test_anonymous_sees_exactly_public_posts():
    visible = policy.filter_visible_posts(ANONYMOUS, MIXED_POSTS)
    assert visible == [p for p in MIXED_POSTS if p.visibility == Visibility.PUBLIC]
    assert len(visible) == 2


def test_member_without_committee_sees_public_and_internal():
    visible = policy.filter_visible_posts(actor(), MIXED_POSTS)
    assert {p.visibility for p in visible} == {Visibility.PUBLIC, Visibility.INTERNAL_ALL}


def test_committee_member_sees_only_own_committee_posts():
    media_member = actor(committee=Committee.MEDIA)
    assert policy.can_view_post(media_member, post(Visibility.COMMITTEE_ONLY, Committee.MEDIA))
    assert not policy.can_view_post(media_member, post(Visibility.COMMITTEE_ONLY, Committee.EVENT))


def test_secondary_committee_membership_matches():
    member = actor(committee=Committee.TECHNIQUE, committees=[Committee.EVENT])
    assert policy.can_view_post(member, post(Visibility.COMMITTEE_ONLY, Committee.EVENT))
    assert policy.can_view_post(member, post(Visibility.COMMITTEE_ONLY, Committee.TECHNIQUE))
    assert not policy.can_view_post(member, post(Visibility.COMMITTEE_ONLY, Committee.MEDIA))


@pytest.mark.parametrize('role', [Role.BUREAU, Role.ADMIN, Role.RESPO, Role.EMBESA])
def test_elevated_roles_see_everything(role):
    assert policy.filter_visible_posts(actor(role=role), MIXED_POSTS) == MIXED_POSTS


def test_admin_only_hidden_from_plain_members():
    assert not policy.can_view_post(actor(committee=Committee.BUREAU), post(Visibility.ADMIN_ONLY))


def test_untagged_committee_post_is_elevated_only():
    broken = post(Visibility.COMMITTEE_ONLY, None)
    assert not policy.can_view_post(actor(committee=Committee.MEDIA), broken)
    assert policy.can_view_post(actor(role=Role.RESPO), broken)


def test_audience_matches_null_committee_never_matches_a_tag():
    assert policy.audience_matches(actor(), None)
    assert not policy.audience_matches(actor(), Committee.MEDIA)


def test_meeting_visibility_follows_target_audience():
    open_meeting = Meeting(title='AG', target_audience=None)
    media_meeting = Meeting(title='Shoot', target_audience=Committee.MEDIA)

    media_member = actor(committee=Committee.MEDIA)
    tech_member = actor(committee=Committee.TECHNIQUE)

    assert policy.can_view_meeting(ANONYMOUS, open_meeting)
    assert policy.can_view_meeting(tech_member, open_meeting)
    assert policy.can_view_meeting(media_member, media_meeting)
    assert not policy.can_view_meeting(tech_member, media_meeting)
    assert policy.can_view_meeting(actor(role=Role.EMBESA), media_meeting)
    assert policy.filter_visible_meetings(tech_member, [open_meeting, media_meeting]) == [open_meeting]


def test_feed_posting_excludes_embesa_but_blog_does_not():
    embesa = actor(role=Role.EMBESA)
    respo = actor(role=Role.RESPO)
    member = actor()

    assert not policy.can_create_post(embesa, PostFlow.FEED)
    assert policy.can_create_post(embesa, PostFlow.BLOG)
    assert policy.can_create_post(respo, PostFlow.FEED)
    assert policy.can_create_post(respo, PostFlow.BLOG)
    assert not policy.can_create_post(member, PostFlow.FEED)
    assert not policy.can_create_post(member, PostFlow.BLOG)


def test_membership_edits_reserved_to_bureau_and_admin():
    assert policy.can_edit_membership(actor(role=Role.BUREAU))
    assert policy.can_edit_membership(actor(role=Role.ADMIN))
    assert not policy.can_edit_membership(actor(role=Role.RESPO))
    assert not policy.can_edit_membership(actor(role=Role.EMBESA))
    assert not policy.can_edit_membership(ANONYMOUS)


def test_points_history_visible_to_owner_or_elevated():
    class Target:
        id = 7

    assert policy.can_view_points_history(actor(member_id=7), Target)
    assert not policy.can_view_points_history(actor(member_id=8), Target)
    assert policy.can_view_points_history(actor(role=Role.RESPO, member_id=8), Target)
    assert not policy.can_view_points_history(ANONYMOUS, Target)


def test_require_raises_permission_denied():
    policy.require(True)
    with pytest.raises(PermissionDeniedError) as excinfo:
        policy.require(False, 'Nope.')
    assert str(excinfo.value) == 'Nope.'
