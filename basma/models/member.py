"""Member model: the club profile and the login account in one row."""
from flask_login import UserMixin, AnonymousUserMixin
from itsdangerous import URLSafeTimedSerializer as Serializer
from itsdangerous import BadSignature, SignatureExpired
from flask import current_app

from .base import db
from .. import bcrypt
from ..constants import Committee, MemberStatus, Role, ELEVATED_ROLES
from ..utils import utcnow, isoformat


class Member(UserMixin, db.Model):
    __tablename__ = 'members'

    id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(150), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    avatar_url = db.Column(db.String(255), nullable=True)
    # Primary committee shown on cards; extra committees live in member_committees
    committee = db.Column(db.Enum(*Committee.ALL, name='committee_type'), nullable=True)
    status = db.Column(db.Enum(*MemberStatus.ALL, name='user_status'),
                       default=MemberStatus.ACTIVE, nullable=False)
    total_points = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    role_assignment = db.relationship(
        'RoleAssignment',
        foreign_keys='RoleAssignment.member_id',
        back_populates='member',
        uselist=False,
        cascade='all, delete-orphan',
        lazy='joined'
    )
    committee_memberships = db.relationship(
        'CommitteeMembership',
        back_populates='member',
        cascade='all, delete-orphan',
        lazy='selectin',
        order_by='CommitteeMembership.committee'
    )
    posts = db.relationship('Post', back_populates='author', cascade='all, delete-orphan',
                            lazy='dynamic')
    likes = db.relationship('PostLike', back_populates='member', cascade='all, delete-orphan',
                            lazy='dynamic')
    comments = db.relationship('PostComment', back_populates='member', cascade='all, delete-orphan',
                               lazy='dynamic')
    attendances = db.relationship('MeetingAttendance', back_populates='member',
                                  cascade='all, delete-orphan', lazy='dynamic')
    points_entries = db.relationship('PointsLogEntry', foreign_keys='PointsLogEntry.member_id',
                                     back_populates='member', cascade='all, delete-orphan',
                                     lazy='dynamic')

    __table_args__ = (
        db.CheckConstraint('total_points >= 0', name='total_points_non_negative'),
    )

    def __repr__(self):
        return f'<Member {self.id}: {self.full_name}>'

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        if not self.password_hash:
            return False
        return bcrypt.check_password_hash(self.password_hash, password)

    def get_reset_token(self):
        s = Serializer(current_app.config['SECRET_KEY'])
        return s.dumps({'member_id': self.id})

    @staticmethod
    def verify_reset_token(token, expires_sec=1800):
        s = Serializer(current_app.config['SECRET_KEY'])
        try:
            member_id = s.loads(token, max_age=expires_sec).get('member_id')
        except (BadSignature, SignatureExpired):
            return None
        return db.session.get(Member, member_id)

    @property
    def is_active(self):
        """Flask-Login refuses to log in inactive accounts; banned members are inactive."""
        return self.status != MemberStatus.BANNED

    @property
    def role_name(self):
        """Members without an assignment row are plain members."""
        if self.role_assignment is None:
            return Role.MEMBER
        return self.role_assignment.role

    @property
    def is_elevated(self):
        return self.role_name in ELEVATED_ROLES

    @property
    def committee_names(self):
        """Every committee the member belongs to, primary committee first."""
        names = []
        if self.committee:
            names.append(self.committee)
        for membership in self.committee_memberships:
            if membership.committee not in names:
                names.append(membership.committee)
        return names

    def to_dict(self, include_email=False):
        """Convert member to dictionary for JSON serialization."""
        data = {
            'id': self.id,
            'full_name': self.full_name,
            'avatar_url': self.avatar_url,
            'committee': self.committee,
            'committees': self.committee_names,
            'role': self.role_name,
            'status': self.status,
            'total_points': self.total_points,
            'created_at': isoformat(self.created_at),
        }
        if include_email:
            data['email'] = self.email
        return data


class AnonymousMember(AnonymousUserMixin):
    """Visitor without a session: reads public content only."""
    role_name = None
    committee = None
    committee_names = ()
    is_elevated = False
