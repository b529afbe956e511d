from rest_framework import permissions


class IsOrderCustomerOrStaff(permissions.BasePermission):
    """
    Order lookup for the ordering site and for staff.

    - Staff users can read any order of their restaurant
    - Customers must send the email address the order was placed with
      (?email=...), so a guessed order number reveals nothing
    """

    def has_permission(self, request, view):
        return True

    def has_object_permission(self, request, view, obj):
        if request.user and request.user.is_authenticated and request.user.is_staff:
            return True

        email = (request.query_params.get("email") or "").strip().lower()
        return bool(email) and email == (obj.customer_email or "").lower()
