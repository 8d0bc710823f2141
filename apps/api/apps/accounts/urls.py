"""
Accounts URLs - sign-up, profile, hospital directory
"""
from django.urls import path

from .views import CompleteProfileView, HospitalListView, MeView, SignUpView

urlpatterns = [
    path('signup/', SignUpView.as_view(), name='account-signup'),
    path('me/', MeView.as_view(), name='account-me'),
    path('me/complete/', CompleteProfileView.as_view(), name='account-complete-profile'),
    path('hospitals/', HospitalListView.as_view(), name='account-hospitals'),
]
