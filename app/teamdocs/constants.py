"""
Central constants shared by the server models and the client models.
"""
from __future__ import annotations

# User roles
ROLE_ADMIN = "admin"
ROLE_MEMBER = "member"
ROLE_VIEWER = "viewer"
USER_ROLES = (ROLE_ADMIN, ROLE_MEMBER, ROLE_VIEWER)

# Team-wide collection permissions (None means private)
COLLECTION_PERMISSIONS = ("read", "read_write")

# Per-user collection membership permissions
MEMBERSHIP_PERMISSIONS = ("read", "read_write", "admin")

# User preference keys
PREF_REMEMBER_LAST_PATH = "rememberLastPath"
PREF_USE_CURSOR_POINTER = "useCursorPointer"
PREF_CODE_BLOCK_LINE_NUMBERS = "codeBlockLineNumbers"
PREF_SEAMLESS_EDIT = "seamlessEdit"
PREF_FULL_WIDTH_DOCUMENTS = "fullWidthDocuments"
PREF_ENABLE_SMART_TEXT = "enableSmartText"

USER_PREFERENCES = frozenset(
    {
        PREF_REMEMBER_LAST_PATH,
        PREF_USE_CURSOR_POINTER,
        PREF_CODE_BLOCK_LINE_NUMBERS,
        PREF_SEAMLESS_EDIT,
        PREF_FULL_WIDTH_DOCUMENTS,
        PREF_ENABLE_SMART_TEXT,
    }
)

# seamlessEdit and fullWidthDocuments have no default: they fall back to the team or caller.
USER_PREFERENCE_DEFAULTS = {
    PREF_REMEMBER_LAST_PATH: True,
    PREF_USE_CURSOR_POINTER: True,
    PREF_CODE_BLOCK_LINE_NUMBERS: True,
    PREF_ENABLE_SMART_TEXT: True,
}

# Team preference keys
TEAM_PREF_SEAMLESS_EDIT = "seamlessEdit"
TEAM_PREF_VIEWERS_CAN_EXPORT = "viewersCanExport"
TEAM_PREF_MEMBERS_CAN_INVITE = "membersCanInvite"
TEAM_PREF_PUBLIC_BRANDING = "publicBranding"
TEAM_PREF_COMMENTING = "commenting"

TEAM_PREFERENCE_DEFAULTS = {
    TEAM_PREF_SEAMLESS_EDIT: True,
    TEAM_PREF_VIEWERS_CAN_EXPORT: True,
    TEAM_PREF_MEMBERS_CAN_INVITE: True,
    TEAM_PREF_PUBLIC_BRANDING: False,
    TEAM_PREF_COMMENTING: True,
}
TEAM_PREFERENCES = frozenset(TEAM_PREFERENCE_DEFAULTS)

# Notification event types and whether users receive them when they never chose
NOTIFICATION_EVENT_DEFAULTS = {
    "documents.publish": True,
    "documents.update": True,
    "collections.create": False,
    "comments.create": True,
    "comments.mentioned": True,
    "emails.invite_accepted": True,
    "emails.onboarding": True,
    "emails.features": True,
    "emails.export_completed": True,
}
NOTIFICATION_EVENT_TYPES = frozenset(NOTIFICATION_EVENT_DEFAULTS)

# Subdomains that can never be claimed by a team
RESERVED_SUBDOMAINS = frozenset(
    {
        "about",
        "admin",
        "api",
        "app",
        "blog",
        "dev",
        "developer",
        "developers",
        "docs",
        "help",
        "login",
        "logout",
        "mail",
        "signin",
        "signup",
        "static",
        "status",
        "support",
        "www",
    }
)

SUBDOMAIN_MIN_LENGTH = 2
SUBDOMAIN_MAX_LENGTH = 32

# A user counts as "recently active" within this window, and last_active_at is
# only written back once it is older than this.
RECENTLY_ACTIVE_MINUTES = 5

DEFAULT_PAGE_LIMIT = 25
MAX_PAGE_LIMIT = 100
