from rest_framework.permissions import BasePermission

ADMIN_ROLES = ('admin', 'superadmin')


class HasRole(BasePermission):
    """Reject authenticated users whose role is not in `allowed_roles`"""
    allowed_roles = ()
    message = 'You do not have the role required to perform this action.'

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return user.role in self.allowed_roles


def role_required(*roles):
    """Build a HasRole permission class for the given roles"""
    return type(
        f"HasRole_{'_'.join(roles)}",
        (HasRole,),
        {'allowed_roles': tuple(roles)},
    )


IsAdminRole = role_required(*ADMIN_ROLES)


def is_admin_user(user):
    """Check if user holds one of the admin roles"""
    return bool(user and user.is_authenticated and user.role in ADMIN_ROLES)
