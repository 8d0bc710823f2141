"""
JWT authentication that records the signed-in user for log correlation.
"""
from rest_framework_simplejwt.authentication import JWTAuthentication

from apps.core.observability.correlation import set_request_user


class CorrelatedJWTAuthentication(JWTAuthentication):
    """
    Bearer-token authentication for every API view.

    Authentication runs inside DRF, after RequestCorrelationMiddleware has
    seen the request, so the user id and roles are attached to the log
    context here.
    """

    def authenticate(self, request):
        result = super().authenticate(request)
        if result is not None:
            set_request_user(result[0])
        return result
