"""
Accounts views: sign-up, own profile, profile completion, hospital directory.
"""
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from apps.core.exceptions import domain_error_response

from .permissions import IsVolunteer
from .serializers import (
    CompleteProfileSerializer,
    HospitalSerializer,
    ProfileSerializer,
    SignUpSerializer,
)
from .services import (
    AccountError,
    ProfileIncompleteError,
    complete_profile,
    delete_account,
    list_hospitals,
    register_user,
    update_profile,
)


class SignUpView(APIView):
    """
    Create an account with a role.

    POST /api/v1/accounts/signup/
    {
        "email": "ops@cityhospital.org",
        "password": "...",
        "full_name": "Dana Ops",
        "role": "hospital",
        "organization_name": "City Hospital",
        "phone": "555-0100"
    }
    """
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = 'signup'

    def post(self, request):
        serializer = SignUpSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            user = register_user(**serializer.validated_data)
        except AccountError as e:
            return domain_error_response(e)

        return Response(ProfileSerializer(user.profile).data, status=status.HTTP_201_CREATED)


class MeView(APIView):
    """
    The signed-in user's profile.

    GET    /api/v1/accounts/me/  - read
    PATCH  /api/v1/accounts/me/  - update
    DELETE /api/v1/accounts/me/  - delete the account and everything it owns
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(ProfileSerializer(request.user.profile).data)

    def patch(self, request):
        profile = request.user.profile
        serializer = ProfileSerializer(profile, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            profile = update_profile(profile, **serializer.validated_data)
        except AccountError as e:
            return domain_error_response(e)

        return Response(ProfileSerializer(profile).data)

    def delete(self, request):
        delete_account(request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


class CompleteProfileView(APIView):
    """
    POST /api/v1/accounts/me/complete/

    Volunteers must complete their donor profile before participating.
    """
    permission_classes = [IsVolunteer]

    def post(self, request):
        profile = request.user.profile
        serializer = CompleteProfileSerializer(profile, data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            profile = complete_profile(profile, **serializer.validated_data)
        except (AccountError, ProfileIncompleteError) as e:
            return domain_error_response(e)

        return Response(ProfileSerializer(profile).data)


class HospitalListView(APIView):
    """
    GET /api/v1/accounts/hospitals/

    Every hospital, for booking a donation appointment. With
    ?emergency_post=<id> the hospital that published the post comes first.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        first_user_id = None
        post_id = request.query_params.get('emergency_post')
        if post_id:
            from apps.emergencies.models import EmergencyPost

            first_user_id = (
                EmergencyPost.objects.filter(pk=post_id)
                .values_list('posted_by_id', flat=True)
                .first()
            )

        hospitals = list_hospitals(first_user_id=first_user_id)
        return Response(HospitalSerializer(hospitals, many=True).data)
