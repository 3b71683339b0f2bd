
class Role:
    """
    Role names stored in member_roles.role.
    Every role except MEMBER is elevated.
    """
    MEMBER = 'member'
    RESPO = 'respo'
    ADMIN = 'admin'
    BUREAU = 'bureau'
    EMBESA = 'embesa'

    ALL = (MEMBER, RESPO, ADMIN, BUREAU, EMBESA)


# Roles that see every restricted item and may manage content
ELEVATED_ROLES = frozenset({Role.BUREAU, Role.ADMIN, Role.RESPO, Role.EMBESA})

# Roles allowed to change another member's role, committees or status
MEMBERSHIP_ADMIN_ROLES = frozenset({Role.BUREAU, Role.ADMIN})


class Committee:
    SPONSORING = 'Sponsoring'
    COMMUNICATION = 'Communication'
    EVENT = 'Event'
    TECHNIQUE = 'Technique'
    MEDIA = 'Media'
    BUREAU = 'Bureau'

    ALL = (SPONSORING, COMMUNICATION, EVENT, TECHNIQUE, MEDIA, BUREAU)


class Visibility:
    PUBLIC = 'public'
    INTERNAL_ALL = 'internal_all'
    COMMITTEE_ONLY = 'committee_only'
    ADMIN_ONLY = 'admin_only'

    ALL = (PUBLIC, INTERNAL_ALL, COMMITTEE_ONLY, ADMIN_ONLY)


class MeetingType:
    ONLINE = 'online'
    PRESENTIAL = 'presential'

    ALL = (ONLINE, PRESENTIAL)


class RsvpStatus:
    ATTENDING = 'attending'
    MAYBE = 'maybe'
    NOT_ATTENDING = 'not_attending'

    # Display order of the attendee dialog
    ALL = (ATTENDING, MAYBE, NOT_ATTENDING)


class MemberStatus:
    ACTIVE = 'active'
    EMBESA = 'embesa'
    BANNED = 'banned'

    ALL = (ACTIVE, EMBESA, BANNED)


class PostFlow:
    """Surfaces that create posts. The feed and the blog CMS differ for embesa."""
    FEED = 'feed'
    BLOG = 'blog'


# Sanctioned complexity scores for the points ledger
POINT_TIERS = (1, 2, 3, 5, 8, 10)


class UploadCategory:
    POSTS = 'posts'
    AVATARS = 'avatars'
