"""
Custom permission classes for account type, variant and role based access control.
"""
from rest_framework.permissions import BasePermission, SAFE_METHODS


def _user(request):
    user = getattr(request, "user", None)
    if user and user.is_authenticated:
        return user
    return None


class IsAdminRole(BasePermission):
    """Allow access only to administrator accounts."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = _user(request)
        return bool(user and (user.account_type == "admin" or user.is_superuser))


class IsStaffMember(BasePermission):
    """Administrators and serving staff (tellers, receptionists, doctors)."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = _user(request)
        return bool(user and (user.account_type in {"admin", "staff"} or user.is_superuser))


class IsBankAccount(BasePermission):
    """Account belongs to the bank variant."""
    def has_permission(self, request, view) -> bool:
        user = _user(request)
        return bool(user and (user.variant == "bank" or user.is_superuser))


class IsHospitalAccount(BasePermission):
    """Account belongs to the hospital variant."""
    def has_permission(self, request, view) -> bool:
        user = _user(request)
        return bool(user and (user.variant == "hospital" or user.is_superuser))


class IsVariantAccount(BasePermission):
    """Account variant matches the ``variant`` URL kwarg of shared endpoints."""
    message = "account belongs to the other variant"

    def has_permission(self, request, view) -> bool:
        user = _user(request)
        if not user:
            return False
        variant = getattr(view, "kwargs", {}).get("variant")
        return bool(user.is_superuser or not variant or user.variant == variant)


def role_permission(flag):
    """Build a permission class requiring a flag of the user's role.

    ``flag`` is a flag name, or a ``{variant: flag}`` dict for endpoints
    shared by both variants (bank roles say ``Ads``, hospital roles
    ``manageAds``).  Administrators always pass; staff without a role are
    refused.
    """

    class HasRolePermission(BasePermission):
        message = "missing role permission"

        def has_permission(self, request, view) -> bool:
            user = _user(request)
            if not user:
                return False
            if user.account_type == "admin" or user.is_superuser:
                return True
            role = getattr(user, "role", None)
            if role is None:
                return False
            wanted = flag
            if isinstance(flag, dict):
                variant = getattr(view, "kwargs", {}).get("variant") or user.variant
                wanted = flag.get(variant)
            return bool(wanted and role.allows(wanted))

    return HasRolePermission


class RoleOrReadOnly(BasePermission):
    """Helper base: reads for any account, writes checked by ``write_permission``."""
    write_permission = IsAdminRole

    def has_permission(self, request, view) -> bool:
        if request.method in SAFE_METHODS:
            return _user(request) is not None
        return self.write_permission().has_permission(request, view)


def manage_or_read(flag):
    """Any authenticated account may read; writes need ``flag`` (or admin)."""
    return type("ManageOrRead", (RoleOrReadOnly,), {"write_permission": role_permission(flag)})
