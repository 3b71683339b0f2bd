import pytest

from basma import db
from basma.auth.identity import Actor
from basma.constants import Committee, POINT_TIERS, Role
from basma.exceptions import PermissionDeniedError, ValidationError
from basma.models import Member, PointsLogEntry
from basma.services.auth_service import AuthService
from basma.services.points_service import PointsService
from basma.utils import utcnow


@pytest.fixture
def admin(ctx, make_member):
    return make_member(full_name='Admin', role=Role.ADMIN)


def test_grant_points_scenario(admin, make_member):
    member = make_member(full_name='Member M')
    before = member.total_points

    entry = PointsService.grant_points(Actor.from_member(admin), member, 'Logistics', 5)

    assert entry.complexity_score == 5
    assert entry.task_description == 'Logistics'
    assert entry.created_by == admin.id
    assert entry.date == utcnow().date()
    assert member.total_points == before + 5
    assert PointsLogEntry.query.filter_by(member_id=member.id).count() == 1


def test_non_elevated_grant_writes_nothing(ctx, make_member):
    member = make_member()
    other = make_member()

    with pytest.raises(PermissionDeniedError):
        PointsService.grant_points(Actor.from_member(other), member, 'Logistics', 5)

    assert PointsLogEntry.query.count() == 0
    assert db.session.get(Member, member.id).total_points == 0


@pytest.mark.parametrize('score', [0, -3, 4, 11, 'abc', None, True, 5.7, 1.9, '5.5', '5e0'])
def test_scores_outside_tiers_rejected(admin, make_member, score):
    member = make_member()
    with pytest.raises(ValidationError):
        PointsService.grant_points(Actor.from_member(admin), member, 'Task', score)
    assert PointsLogEntry.query.count() == 0


@pytest.mark.parametrize('score', POINT_TIERS)
def test_every_tier_accepted(admin, make_member, score):
    member = make_member()
    PointsService.grant_points(Actor.from_member(admin), member, 'Task', str(score))
    assert member.total_points == score


def test_task_description_required(admin, make_member):
    with pytest.raises(ValidationError):
        PointsService.grant_points(Actor.from_member(admin), make_member(), '   ', 3)


def test_total_equals_ledger_sum_after_many_grants(admin, make_member):
    alice, bob = make_member(), make_member()
    grants = [(alice, 1), (bob, 8), (alice, 10), (alice, 3), (bob, 2)]
    for member, score in grants:
        PointsService.grant_points(Actor.from_member(admin), member, 'Task', score)

    for member in (alice, bob):
        refreshed = db.session.get(Member, member.id)
        assert refreshed.total_points == PointsService.ledger_total(refreshed)
    assert alice.total_points == 14
    assert bob.total_points == 10


def test_history_newest_first_and_limited(admin, make_member):
    member = make_member()
    actor = Actor.from_member(admin)
    PointsService.grant_points(actor, member, 'Old', 1, date='2026-01-01')
    PointsService.grant_points(actor, member, 'New', 2, date='2026-03-01')
    PointsService.grant_points(actor, member, 'Middle', 3, date='2026-02-01')

    history = PointsService.history_for(member)
    assert [e.task_description for e in history] == ['New', 'Middle', 'Old']
    assert len(PointsService.history_for(member, limit=2)) == 2


def test_invalid_date_rejected(admin, make_member):
    with pytest.raises(ValidationError):
        PointsService.grant_points(Actor.from_member(admin), make_member(), 'Task', 2, date='01/02/2026')


def test_recalculate_totals_repairs_drift(admin, make_member):
    member = make_member()
    PointsService.grant_points(Actor.from_member(admin), member, 'Task', 5)
    member.total_points = 42
    db.session.commit()

    corrected = PointsService.recalculate_totals()

    assert corrected == [(member.id, 42, 5)]
    assert db.session.get(Member, member.id).total_points == 5
    assert PointsService.recalculate_totals() == []


def test_leaderboard_ranking_and_invalidation(admin, make_member):
    actor = Actor.from_member(admin)
    zoe = make_member(full_name='Zoe', committee=Committee.MEDIA)
    adam = make_member(full_name='Adam', committee=Committee.EVENT)
    PointsService.grant_points(actor, zoe, 'Shoot', 8)

    board = PointsService.leaderboard()
    assert board[0]['full_name'] == 'Zoe'
    assert board[0]['rank'] == 1
    assert board[0]['tasks_completed'] == 1

    # Each grant invalidates the cached board
    PointsService.grant_points(actor, adam, 'Stand', 10)
    PointsService.grant_points(actor, adam, 'Setup', 1)
    board = PointsService.leaderboard()
    assert board[0]['full_name'] == 'Adam'
    assert board[0]['points'] == 11
    assert board[0]['tasks_completed'] == 2

    media = PointsService.leaderboard(committee=Committee.MEDIA)
    assert [row['full_name'] for row in media] == ['Zoe']
    assert len(PointsService.leaderboard(limit=1)) == 1


def test_leaderboard_ties_broken_by_name(ctx, make_member):
    make_member(full_name='Bella')
    make_member(full_name='Amine')
    names = [row['full_name'] for row in PointsService.leaderboard()]
    assert names == ['Amine', 'Bella']


def test_whole_number_float_score_accepted(admin, make_member):
    member = make_member()
    entry = PointsService.grant_points(Actor.from_member(admin), member, 'Task', 8.0)
    assert entry.complexity_score == 8
    assert member.total_points == 8


def test_sign_up_refreshes_cached_leaderboard(ctx, make_member):
    make_member(full_name='Existing')
    assert [row['full_name'] for row in PointsService.leaderboard()] == ['Existing']

    AuthService.sign_up('fresh@basma.test', 'longenough', 'Fresh')

    assert [row['full_name'] for row in PointsService.leaderboard()] == ['Existing', 'Fresh']
