from fastapi import Request

from registry import RoomRegistry
from relay import RelayEngine


def get_registry(request: Request) -> RoomRegistry:
    return request.app.state.registry


def get_relay(request: Request) -> RelayEngine:
    return request.app.state.relay
