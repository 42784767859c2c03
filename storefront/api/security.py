"""
Declarative request authorization rules.

Rules are evaluated in order and the first matching entry decides;
requests matching no entry require authentication.
"""

from dataclasses import dataclass
from enum import Enum

from storefront.models.db import ROLE_ADMIN
from storefront.services.session_service import Principal


@dataclass(frozen=True)
class RequestMatcher:
    """
    Ant-style path pattern.

    ``/shop/**`` matches ``/shop`` and everything below it;
    any other pattern matches the exact path.
    """

    pattern: str

    def matches(self, path: str) -> bool:
        if self.pattern.endswith("/**"):
            base = self.pattern[:-3]
            return path == base or path.startswith(base + "/")
        return path == self.pattern


class AccessRule(Enum):
    PERMIT_ALL = "permit_all"
    AUTHENTICATED = "authenticated"
    HAS_AUTHORITY = "has_authority"


class AccessDecision(Enum):
    GRANTED = "granted"
    LOGIN_REQUIRED = "login_required"
    DENIED = "denied"


@dataclass(frozen=True)
class AccessControlEntry:
    matchers: tuple[RequestMatcher, ...]
    rule: AccessRule
    authority: str | None = None

    def matches(self, path: str) -> bool:
        return any(matcher.matches(path) for matcher in self.matchers)


def _matchers(*patterns: str) -> tuple[RequestMatcher, ...]:
    return tuple(RequestMatcher(p) for p in patterns)


def permit_all(*patterns: str) -> AccessControlEntry:
    return AccessControlEntry(_matchers(*patterns), AccessRule.PERMIT_ALL)


def has_authority(authority: str, *patterns: str) -> AccessControlEntry:
    return AccessControlEntry(_matchers(*patterns), AccessRule.HAS_AUTHORITY, authority)


def authenticated(*patterns: str) -> AccessControlEntry:
    return AccessControlEntry(_matchers(*patterns), AccessRule.AUTHENTICATED)


@dataclass(frozen=True)
class SecurityRules:
    ignored: tuple[RequestMatcher, ...]
    entries: tuple[AccessControlEntry, ...]
    login_url: str = "/login"

    def is_ignored(self, path: str) -> bool:
        return any(matcher.matches(path) for matcher in self.ignored)

    def decide(self, path: str, principal: Principal | None) -> AccessDecision:
        for entry in self.entries:
            if not entry.matches(path):
                continue
            return self._apply(entry, principal)
        return AccessDecision.GRANTED if principal is not None else AccessDecision.LOGIN_REQUIRED

    @staticmethod
    def _apply(entry: AccessControlEntry, principal: Principal | None) -> AccessDecision:
        if entry.rule is AccessRule.PERMIT_ALL:
            return AccessDecision.GRANTED
        if principal is None:
            return AccessDecision.LOGIN_REQUIRED
        if entry.rule is AccessRule.HAS_AUTHORITY and not principal.has_authority(entry.authority or ""):
            return AccessDecision.DENIED
        return AccessDecision.GRANTED


DEFAULT_SECURITY_RULES = SecurityRules(
    ignored=_matchers(
        "/resources/**",
        "/static/**",
        "/images/**",
        "/productImages/**",
        "/css/**",
        "/js/**",
        "/favicon.ico",
    ),
    entries=(
        permit_all(
            "/",
            "/shop/**",
            "/login",
            "/register",
            "/logout",
            "/oauth2/**",
            "/login/oauth2/**",
            "/403",
            "/404",
            "/500",
            "/health",
        ),
        has_authority(ROLE_ADMIN, "/admin/**"),
    ),
)
