from django.urls import path

from . import logout

app_name = "fedlogout_app"

urlpatterns = [
    path(
        "oidc/backchannel-logout/",
        logout.backchannel_logout,
        name="backchannel_logout",
    ),
    path(
        "t/<str:tenant>/oidc/backchannel-logout/",
        logout.backchannel_logout,
        name="tenant_backchannel_logout",
    ),
]
