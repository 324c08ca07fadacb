from rest_framework.permissions import BasePermission

from .models import User


class HasRole(BasePermission):
    """Grant access to authenticated users whose role is in allowed_roles"""
    allowed_roles = ()
    message = 'Insufficient permissions'

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if user.is_superuser:
            return True
        return user.role in self.allowed_roles


class IsAdmin(HasRole):
    allowed_roles = (User.ROLE_ADMIN,)
    message = 'Administrator access required'


class IsEmployee(HasRole):
    allowed_roles = (User.ROLE_EMPLOYEE, User.ROLE_ADMIN)
    message = 'Employee access required'


class IsCitizen(HasRole):
    allowed_roles = (User.ROLE_CITIZEN, User.ROLE_EMPLOYEE, User.ROLE_ADMIN)


class IsEmployeeOrReadOnly(BasePermission):
    """Any authenticated user may read; writes need an employee or admin"""
    message = 'Employee access required'

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if request.method in ('GET', 'HEAD', 'OPTIONS'):
            return True
        return user.is_employee
