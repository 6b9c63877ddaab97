LOGOUT_TOKEN_PARAM = "logout_token"

BACKCHANNEL_LOGOUT_EVENT = "http://schemas.openid.net/event/backchannel-logout"

LOGOUT_SUCCESS = "OIDC federated logout success"

# Name of the catch-all provider that stands in for the tenant's resident IdP
DEFAULT_IDP_NAME = "default"

DEFAULT_TENANT = "carbon.super"

# seconds
DEFAULT_IAT_VALIDITY_PERIOD = 15000
DEFAULT_JWKS_TIMEOUT = 30

SESSION_SID_KEY = "oidc_sid"
SESSION_IDP_KEY = "oidc_idp"
SESSION_TENANT_KEY = "oidc_tenant"
SESSION_SUB_KEY = "oidc_sub"
