"""Cache key builders. Single place for the Redis key namespace.

Every key component (user_id, organization_id, period, window) goes through
``escape_key_component``: ``%`` and KEY_SEP are percent-encoded, so two
different identities can never map to the same key and ordinary ids produce
exactly the keys the web tier writes. The rate-limit identifier is the
exception: it is a composite the caller builds from already escaped parts.
"""

KEY_SEP = ":"

PREFIX_MEMBERSHIP = "membership"
PREFIX_BRAND_KIT = "brandkit"
PREFIX_BRAND_GUIDE = "brandguide"
PREFIX_QUOTA = "quota"
PREFIX_RATE_LIMIT = "ratelimit"

# Placeholder for organization-wide quota rows (no user)
ORG_SCOPE = "org"
# A user whose id is literally "org"; escape output never contains "%6F"
ESCAPED_ORG_SCOPE = "%6Frg"


def escape_key_component(value: str) -> str:
    """Percent-encode ``%`` and KEY_SEP so ``value`` is safe as one key part.

    Args:
        value: Raw component, possibly empty.

    Returns:
        str: The component with ``%`` as ``%25`` and ``:`` as ``%3A``.
    """
    return value.replace("%", "%25").replace(KEY_SEP, "%3A")


def _join(prefix: str, *parts: str) -> str:
    return KEY_SEP.join([prefix, *(escape_key_component(part) for part in parts)])


def membership_key(user_id: str, organization_id: str) -> str:
    """Cache key for a user's membership in an organization."""
    return _join(PREFIX_MEMBERSHIP, user_id, organization_id)


def brand_kit_key(organization_id: str) -> str:
    """Cache key for an organization's brand kit."""
    return _join(PREFIX_BRAND_KIT, organization_id)


def brand_guide_preference_key(user_id: str, organization_id: str) -> str:
    """Cache key for a user's brand-guide toggle within an organization."""
    return _join(PREFIX_BRAND_GUIDE, user_id, organization_id)


def quota_key(organization_id: str, user_id: str | None, period: str) -> str:
    """
    Cache key for a usage quota hash.

    Organization-wide quotas (user_id None) use the ``"org"`` placeholder. A
    real user id equal to the placeholder is stored as ``"%6Frg"`` instead.
    """
    if user_id is None:
        scope = ORG_SCOPE
    elif user_id == ORG_SCOPE:
        scope = ESCAPED_ORG_SCOPE
    else:
        scope = escape_key_component(user_id)
    return KEY_SEP.join(
        [
            PREFIX_QUOTA,
            escape_key_component(organization_id),
            scope,
            escape_key_component(period),
        ]
    )


def rate_limit_key(identifier: str, window: str) -> str:
    """Cache key for a fixed-window rate-limit counter.

    ``identifier`` is used as given; build it with ``escape_key_component``
    applied to each id it contains.
    """
    return KEY_SEP.join([PREFIX_RATE_LIMIT, identifier, escape_key_component(window)])
