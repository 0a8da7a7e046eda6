"""Socket.IO room names shared by the connect handler and the dispatcher."""

ADMIN_ROOM = "admin"

NEW_ALERT_EVENT = "NEW_ALERT"


def station_room(station_id) -> str:
    return f"station:{station_id}"


def user_room(user_id) -> str:
    return f"user:{user_id}"


def hotel_room(hotel_id) -> str:
    return f"hotel:{hotel_id}"
