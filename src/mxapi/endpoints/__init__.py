"""Concrete client-server API endpoints built on the mxapi core.

Each endpoint is a pair of request/response models.  The request class
carries the endpoint's metadata and a reference to its response class.
"""
from __future__ import annotations

from mxapi.endpoints.profile import (
    DeleteProfileKeyRequest,
    DeleteProfileKeyResponse,
    DeleteTimezoneKeyRequest,
    DeleteTimezoneKeyResponse,
    GetProfileKeyRequest,
    GetProfileKeyResponse,
    GetProfileRequest,
    GetProfileResponse,
    GetTimezoneKeyRequest,
    GetTimezoneKeyResponse,
    SetTimezoneKeyRequest,
    SetTimezoneKeyResponse,
)
from mxapi.endpoints.room import ReportRoomRequest, ReportRoomResponse
from mxapi.endpoints.state import GetStateEventsForKeyRequest, GetStateEventsForKeyResponse

__all__ = [
    # Profile
    "GetProfileRequest",
    "GetProfileResponse",
    "GetProfileKeyRequest",
    "GetProfileKeyResponse",
    "DeleteProfileKeyRequest",
    "DeleteProfileKeyResponse",
    "GetTimezoneKeyRequest",
    "GetTimezoneKeyResponse",
    "SetTimezoneKeyRequest",
    "SetTimezoneKeyResponse",
    "DeleteTimezoneKeyRequest",
    "DeleteTimezoneKeyResponse",
    # Room
    "ReportRoomRequest",
    "ReportRoomResponse",
    # State
    "GetStateEventsForKeyRequest",
    "GetStateEventsForKeyResponse",
]
