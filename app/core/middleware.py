from __future__ import annotations

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.context import set_room_id


class RoomContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        """
        Sets room_id into contextvars for the lifetime of the request.

        Priority:
        1. Path param: /rooms/{room_id}
        2. Header: X-Room-Id
        """
        room_id = None

        if "room_id" in request.path_params:
            room_id = request.path_params.get("room_id")

        if not room_id:
            room_id = request.headers.get("X-Room-Id")

        try:
            if room_id:
                set_room_id(str(room_id))
            response = await call_next(request)
            return response
        finally:
            # always clear context
            set_room_id(None)
