"""Pydantic models for events received from the host browser collaborators."""

from __future__ import annotations

from typing import Literal

import pydantic

from privacy_guard.utils.serialization import CAMEL_CONFIG

DecisionAction = Literal["block", "allow"]


class HttpHeader(pydantic.BaseModel):
    """A single HTTP header as reported by the interception layer."""

    name: str
    value: str = ""


class RequestEvent(pydantic.BaseModel):
    """A request about to be sent."""

    model_config = CAMEL_CONFIG

    session_id: str
    url: str
    resource_type: str = "other"
    document_url: str = ""


class ResponseHeadersEvent(pydantic.BaseModel):
    """Response headers received for a request."""

    model_config = CAMEL_CONFIG

    session_id: str
    url: str
    response_headers: list[HttpHeader] = pydantic.Field(default_factory=list)


class RequestHeadersEvent(pydantic.BaseModel):
    """Request headers about to be sent."""

    model_config = CAMEL_CONFIG

    session_id: str
    request_headers: list[HttpHeader] = pydantic.Field(default_factory=list)


class NavigateEvent(pydantic.BaseModel):
    """A top-level navigation in a browsing context."""

    url: str


class CookiePair(pydantic.BaseModel):
    """Name and value of a cookie visible to the page origin."""

    name: str = ""
    value: str = ""


class CookieSnapshot(pydantic.BaseModel):
    """Current cookies for the page origin, from the cookie store."""

    cookies: list[CookiePair] = pydantic.Field(default_factory=list)


class Decision(pydantic.BaseModel):
    """Block/allow verdict returned to the interception layer."""

    model_config = CAMEL_CONFIG

    action: DecisionAction
    is_tracker: bool = False
    is_third_party: bool = False
    matched_domain: str = ""
    rule: str = "none"

    @property
    def cancel(self) -> bool:
        return self.action == "block"


class UserLists(pydantic.BaseModel):
    """Personalisation lists persisted by the settings collaborator."""

    model_config = CAMEL_CONFIG

    user_blocklist: list[str] = pydantic.Field(default_factory=list)
    user_allowlist: list[str] = pydantic.Field(default_factory=list)
