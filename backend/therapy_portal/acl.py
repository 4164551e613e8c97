"""Access control list constants and helpers.

The API uses string permission names to authorize actions.  This module
defines all available permissions and maps default permissions for each
user role.  The same names are stored on care-team links, where they limit
what a non-owning member may do for a particular child.
"""

PERM_ADD_CHILD = "add_child"
PERM_EDIT_CHILD = "edit_child"
PERM_REMOVE_CHILD = "remove_child"
PERM_SHARE_CHILD = "share_child"
PERM_RUN_SCREENING = "run_screening"
PERM_VIEW_SCREENINGS = "view_screenings"
PERM_MANAGE_GOALS = "manage_goals"
PERM_LOG_PROGRESS = "log_progress"
PERM_AWARD_STARS = "award_stars"

ALL_PERMISSIONS = [
    PERM_ADD_CHILD,
    PERM_EDIT_CHILD,
    PERM_REMOVE_CHILD,
    PERM_SHARE_CHILD,
    PERM_RUN_SCREENING,
    PERM_VIEW_SCREENINGS,
    PERM_MANAGE_GOALS,
    PERM_LOG_PROGRESS,
    PERM_AWARD_STARS,
]

# Granted on a care-team link when a therapist joins without explicit choices
THERAPIST_LINK_PERMISSIONS = [
    PERM_VIEW_SCREENINGS,
    PERM_MANAGE_GOALS,
    PERM_LOG_PROGRESS,
    PERM_AWARD_STARS,
]

ROLE_DEFAULT_PERMISSIONS = {
    "admin": ALL_PERMISSIONS,
    "parent": ALL_PERMISSIONS,
    "therapist": THERAPIST_LINK_PERMISSIONS,
}


def get_default_permissions_for_role(role: str) -> list[str]:
    return ROLE_DEFAULT_PERMISSIONS.get(role, [])
