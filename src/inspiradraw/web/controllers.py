"""Litestar controllers for inspiradraw API endpoints."""

from __future__ import annotations

from typing import ClassVar

from litestar import Controller, get, post, put
from litestar.response import Response
from litestar.status_codes import HTTP_200_OK, HTTP_201_CREATED, HTTP_204_NO_CONTENT, HTTP_409_CONFLICT

from inspiradraw.config import TOKEN_COOKIE_NAME, RealtimeSettings
from inspiradraw.exceptions import RoomExistsError
from inspiradraw.services.rooms import RoomService
from inspiradraw.web.dto import (
    ChangePasswordDTO,
    CreateRoomDTO,
    CreateRoomResponseDTO,
    RoomStatusDTO,
    VerifyResponseDTO,
    VerifyRoomDTO,
    status_to_response,
    verify_to_response,
)


class VerifyController(Controller):
    """Controller for the room verification handshake.

    A successful verification hands out a one-time token, both in the
    body and as an httpOnly cookie, that the WebSocket `auth` frame can
    redeem instead of resending the password.
    """

    path = "/verify"
    tags: ClassVar[list[str]] = ["Rooms"]

    @post("/", status_code=HTTP_200_OK)
    async def verify(
        self,
        data: VerifyRoomDTO,
        room_service: RoomService,
        realtime_settings: RealtimeSettings,
    ) -> Response[VerifyResponseDTO]:
        """Verify a room id and password, creating the room if it is new.

        Args:
            data: The room id and password.
            room_service: The room service instance (injected).
            realtime_settings: Runtime settings (injected).

        Returns:
            The verification result.

        Raises:
            RoomValidationError: If the room id or password is missing.
            StoreUnavailableError: If the credential store fails.
        """
        result = await room_service.verify(data.room_id, data.password)
        response = Response(content=verify_to_response(result))
        if result.token:
            response.set_cookie(
                key=TOKEN_COOKIE_NAME,
                value=result.token,
                max_age=realtime_settings.token_ttl_seconds,
                httponly=True,
                samesite="strict",
                secure=realtime_settings.cookie_secure,
            )
        return response


class RoomController(Controller):
    """Controller for room management operations."""

    path = "/rooms"
    tags: ClassVar[list[str]] = ["Rooms"]

    @post("/")
    async def create_room(self, data: CreateRoomDTO, room_service: RoomService) -> Response[CreateRoomResponseDTO]:
        """Create a room.

        Args:
            data: The room id and optional password.
            room_service: The room service instance (injected).

        Returns:
            201 with success true, or 409 with success false if the id is taken.
        """
        try:
            await room_service.create_room(data.room_id, data.password)
        except RoomExistsError:
            return Response(content=CreateRoomResponseDTO(success=False), status_code=HTTP_409_CONFLICT)
        return Response(content=CreateRoomResponseDTO(success=True), status_code=HTTP_201_CREATED)

    @get("/{room_id:str}")
    async def get_room(self, room_id: str, room_service: RoomService) -> RoomStatusDTO:
        """Get the public status of a room.

        Args:
            room_id: The room identifier.
            room_service: The room service instance (injected).

        Returns:
            Whether the room exists, is live, and needs a password.
        """
        status = await room_service.room_status(room_id)
        return status_to_response(status)

    @put("/{room_id:str}/password", status_code=HTTP_204_NO_CONTENT)
    async def change_password(self, room_id: str, data: ChangePasswordDTO, room_service: RoomService) -> None:
        """Replace a room's password.

        Args:
            room_id: The room identifier.
            data: The current and new passwords.
            room_service: The room service instance (injected).

        Raises:
            RoomNotFoundError: If the room does not exist.
            InvalidPasswordError: If the current password is wrong.
        """
        await room_service.change_password(room_id, data.current_password, data.new_password)
