"""Post, like and comment models for the feed and the blog."""
from .base import db
from ..constants import Committee, Visibility
from ..utils import utcnow, isoformat


class Post(db.Model):
    __tablename__ = 'posts'

    id = db.Column(db.Integer, primary_key=True)
    author_id = db.Column(db.Integer, db.ForeignKey('members.id', ondelete='CASCADE'),
                          nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    content = db.Column(db.Text, nullable=False)
    image_url = db.Column(db.String(1024), nullable=True)
    visibility = db.Column(db.Enum(*Visibility.ALL, name='post_visibility'),
                           default=Visibility.INTERNAL_ALL, nullable=False)
    committee_tag = db.Column(db.Enum(*Committee.ALL, name='committee_type'), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    author = db.relationship('Member', back_populates='posts')
    likes = db.relationship('PostLike', back_populates='post', cascade='all, delete-orphan',
                            lazy='dynamic')
    comments = db.relationship('PostComment', back_populates='post', cascade='all, delete-orphan',
                               lazy='dynamic', order_by='PostComment.created_at')

    __table_args__ = (
        # committee_tag is set exactly when the post is committee-only
        db.CheckConstraint(
            "(visibility = 'committee_only' AND committee_tag IS NOT NULL) OR "
            "(visibility != 'committee_only' AND committee_tag IS NULL)",
            name='committee_tag_matches_visibility'
        ),
    )

    def __repr__(self):
        return f'<Post {self.id} {self.visibility}>'

    def to_dict(self):
        return {
            'id': self.id,
            'author_id': self.author_id,
            'author_name': self.author.full_name if self.author else None,
            'author_avatar_url': self.author.avatar_url if self.author else None,
            'title': self.title,
            'content': self.content,
            'image_url': self.image_url,
            'visibility': self.visibility,
            'committee_tag': self.committee_tag,
            'created_at': isoformat(self.created_at),
            'updated_at': isoformat(self.updated_at),
        }


class PostLike(db.Model):
    __tablename__ = 'post_likes'

    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(db.Integer, db.ForeignKey('posts.id', ondelete='CASCADE'), nullable=False)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id', ondelete='CASCADE'), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    post = db.relationship('Post', back_populates='likes')
    member = db.relationship('Member', back_populates='likes')

    __table_args__ = (
        db.UniqueConstraint('post_id', 'member_id', name='uq_post_like'),
        db.Index('ix_post_likes_post', 'post_id'),
    )


class PostComment(db.Model):
    __tablename__ = 'post_comments'

    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(db.Integer, db.ForeignKey('posts.id', ondelete='CASCADE'), nullable=False)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id', ondelete='CASCADE'), nullable=False)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    post = db.relationship('Post', back_populates='comments')
    member = db.relationship('Member', back_populates='comments')

    __table_args__ = (
        db.Index('ix_post_comments_post_created', 'post_id', 'created_at'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'post_id': self.post_id,
            'member_id': self.member_id,
            'author_name': self.member.full_name if self.member else None,
            'author_avatar_url': self.member.avatar_url if self.member else None,
            'content': self.content,
            'created_at': isoformat(self.created_at),
        }
