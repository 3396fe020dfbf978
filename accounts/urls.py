from django.urls import path

from .auth_views import (
    confirm_password_view, forgot_password_view, login_view, logout_view,
    me_view, register_view, reset_password_view, send_verification_view,
    two_factor_challenge_view, verification_notice_view, verify_email_view,
)
from .two_factor_views import recovery_codes_view, two_factor_confirm_view, two_factor_view
from .views import account_view, avatar_view, password_view, preferences_view, security_view

urlpatterns = [
    # Authentication
    path('register/', register_view, name='register'),
    path('login/', login_view, name='login'),
    path('logout/', logout_view, name='logout'),
    path('two-factor-challenge/', two_factor_challenge_view, name='two_factor_login'),
    path('forgot-password/', forgot_password_view, name='password_email'),
    path('reset-password/', reset_password_view, name='password_store'),
    path('confirm-password/', confirm_password_view, name='password_confirm'),
    path('verify-email/', verification_notice_view, name='verification_notice'),
    path('verify-email/<uuid:id>/<str:hash>/', verify_email_view, name='verification_verify'),
    path('email/verification-notification/', send_verification_view, name='verification_send'),
    path('auth/me/', me_view, name='auth_me'),

    # Two factor management
    path('user/two-factor-authentication/', two_factor_view, name='two_factor'),
    path('user/confirmed-two-factor-authentication/', two_factor_confirm_view, name='two_factor_confirm'),
    path('user/two-factor-recovery-codes/', recovery_codes_view, name='two_factor_recovery_codes'),

    # Account settings
    path('account/', account_view, name='account'),
    path('account/password/', password_view, name='account_password'),
    path('account/preferences/', preferences_view, name='account_preferences'),
    path('account/avatar/', avatar_view, name='account_avatar'),
    path('account/security/', security_view, name='account_security'),
]
