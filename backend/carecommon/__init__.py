"""carecommon: shared library for the user/care-team onboarding services.

Components:
    validators  tag-driven struct validation
    client      public user/care-team API client
    services    landing config loader and request context
    handlers    static asset responder
"""

__version__ = "1.0.0"
