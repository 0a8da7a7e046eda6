"""
Real-time push over Socket.IO rooms.
"""

from .broadcaster import Broadcaster, SocketIOBroadcaster
from .rooms import ADMIN_ROOM, NEW_ALERT_EVENT, hotel_room, station_room, user_room

__all__ = [
    'Broadcaster',
    'SocketIOBroadcaster',
    'ADMIN_ROOM',
    'NEW_ALERT_EVENT',
    'station_room',
    'user_room',
    'hotel_room',
]
