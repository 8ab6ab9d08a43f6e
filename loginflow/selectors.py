"""
Symbolic signal ids and their CSS selectors.

The state machine only speaks in signal ids; a surface implementation maps
them to whatever its rendering layer understands. ``SELECTORS`` is the table
used by ``PlaywrightSurface``.
"""

PRIMARY_BUTTON = "primary_button"
SECONDARY_BUTTON = "secondary_button"
SUBMIT_BUTTON = "submit_button"
BACK_BUTTON = "back_button"

EMAIL_TILE = "email_tile"
EMAIL_TILE_LEGACY = "email_tile_legacy"
PASSWORD_TILE = "password_tile"
RECOVERY_EMAIL = "recovery_email"
ACCOUNT_LOCKED = "account_locked"
ERROR_ALERT = "error_alert"
PASSWORD_ENTRY = "password_entry"
EMAIL_ENTRY = "email_entry"
KMSI_VIDEO = "kmsi_video"
PASSKEY_VIDEO = "passkey_video"
PASSKEY_ERROR = "passkey_error"
PASSWORDLESS_CHECK = "passwordless_check"
TOTP_INPUT = "totp_input"
TOTP_FORM_LEGACY = "totp_form_legacy"
IDENTITY_BANNER = "identity_banner"
VIEW_FOOTER = "view_footer"
OTHER_WAYS_TO_SIGN_IN = "other_ways_to_sign_in"
OTP_CODE_ENTRY = "otp_code_entry"
OTP_INPUT = "otp_input"
NET_ERROR_PAGE = "net_error_page"

EMAIL_FIELD = "email_field"
PASSWORD_FIELD = "password_field"
PREFILLED_EMAIL = "prefilled_email"

TOTP_FIELD = "totp_field"
TOTP_FIELD_SECONDARY = "totp_field_secondary"
CODE_INPUT_WRAPPER = "code_input_wrapper"
CODE_FIELD_SECONDARY = "code_field_secondary"
PASSWORDLESS_NUMBER = "passwordless_number"
ERROR_MESSAGE = "error_message"
SUBTITLE = "subtitle"

SEARCH_PROFILE = "search_profile"
REQUEST_TOKEN = "request_token"
REQUEST_TOKEN_META = "request_token_meta"
CONSENT_OVERLAY = "consent_overlay"
CONSENT_OVERLAY_REJECT = "consent_overlay_reject"
CONSENT_OVERLAY_ACCEPT = "consent_overlay_accept"

SELECTORS: dict[str, str] = {
    PRIMARY_BUTTON: 'button[data-testid="primaryButton"]',
    SECONDARY_BUTTON: 'button[data-testid="secondaryButton"]',
    SUBMIT_BUTTON: 'button[type="submit"]',
    BACK_BUTTON: "#back-button",
    EMAIL_TILE: '[data-testid="tile"]:has(svg path[d*="M5.25 4h13.5a3.25"])',
    EMAIL_TILE_LEGACY: 'img[data-testid="accessibleImg"][src*="picker_verify_email"]',
    PASSWORD_TILE: '[data-testid="tile"]:has(svg path[d*="M11.78 10.22a.75.75"])',
    RECOVERY_EMAIL: '[data-testid="proof-confirmation"]',
    ACCOUNT_LOCKED: "#serviceAbuseLandingTitle",
    ERROR_ALERT: 'div[role="alert"]',
    PASSWORD_ENTRY: '[data-testid="passwordEntry"]',
    EMAIL_ENTRY: "input#usernameEntry",
    KMSI_VIDEO: '[data-testid="kmsiVideo"]',
    PASSKEY_VIDEO: '[data-testid="biometricVideo"]',
    PASSKEY_ERROR: '[data-testid="registrationImg"]',
    PASSWORDLESS_CHECK: '[data-testid="deviceShieldCheckmarkVideo"]',
    TOTP_INPUT: 'input[name="otc"]',
    TOTP_FORM_LEGACY: 'form[name="OneTimeCodeViewForm"]',
    IDENTITY_BANNER: '[data-testid="identityBanner"]',
    VIEW_FOOTER: '[data-testid="viewFooter"] >> [role="button"]',
    OTHER_WAYS_TO_SIGN_IN: '[data-testid="viewFooter"] span[role="button"]',
    OTP_CODE_ENTRY: '[data-testid="codeEntry"]',
    OTP_INPUT: 'div[data-testid="codeEntry"]',
    NET_ERROR_PAGE: "body.neterror",
    EMAIL_FIELD: 'input[type="email"]',
    PASSWORD_FIELD: 'input[type="password"]',
    PREFILLED_EMAIL: "#userDisplayName",
    TOTP_FIELD: 'form[name="OneTimeCodeViewForm"] input[type="text"], input#floatingLabelInput5',
    TOTP_FIELD_SECONDARY: 'input[id="otc-confirmation-input"], input[name="otc"]',
    CODE_INPUT_WRAPPER: '[data-testid="codeInputWrapper"]',
    CODE_FIELD_SECONDARY: 'input[id="otc-confirmation-input"], input[name="otc"]',
    PASSWORDLESS_NUMBER: 'div[data-testid="displaySign"]',
    ERROR_MESSAGE: 'div[role="alert"], [data-testid="errorMessage"], #field-8__validationMessage',
    SUBTITLE: '[data-testid="subtitle"], div#emailOtpDescription',
    SEARCH_PROFILE: "#id_n",
    REQUEST_TOKEN: 'input[name="__RequestVerificationToken"]',
    REQUEST_TOKEN_META: 'meta[name="__RequestVerificationToken"]',
    CONSENT_OVERLAY: "#bnp_overlay_wrapper",
    CONSENT_OVERLAY_REJECT: '#bnp_btn_reject, button[aria-label*="Reject" i]',
    CONSENT_OVERLAY_ACCEPT: "#bnp_btn_accept",
}

# Incidental consent / welcome messages dismissed during session confirmation.
# (signal id, selector, label)
CONSENT_BUTTONS: tuple[tuple[str, str, str], ...] = (
    ("consent_accept", "#acceptButton", "AcceptButton"),
    ("consent_search_cookies", "#wcpConsentBannerCtrl > * > button:first-child", "Search Cookies Accept"),
    ("consent_skip_for_now", ".ext-secondary.ext-button", '"Skip for now" Button'),
    ("consent_landing_action", "#iLandingViewAction", "iLandingViewAction"),
    ("consent_show_skip", "#iShowSkip", "iShowSkip"),
    ("consent_next", "#iNext", "iNext"),
    ("consent_looks_good", "#iLooksGood", "iLooksGood"),
    ("consent_si_button", "#idSIButton9", "idSIButton9"),
    ("consent_primary", ".ms-Button.ms-Button--primary", "Primary Button"),
    ("consent_mobile_welcome", ".c-glyph.glyph-cancel", "Mobile Welcome Button"),
    ("consent_app_banner", ".maybe-later", "Mobile Rewards App Banner"),
    ("consent_cookie_banner", "#bnp_btn_accept", "Search Cookie Banner"),
    ("consent_reward_coupon", "#reward_pivot_earn", "Reward Coupon Accept"),
)

SELECTORS.update({signal: selector for signal, selector, _label in CONSENT_BUTTONS})


def resolve_selector(signal_id: str) -> str:
    """Map a signal id to its selector; unknown ids are treated as raw selectors."""
    return SELECTORS.get(signal_id, signal_id)
