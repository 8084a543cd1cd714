from .structs import ConnectionState, AuthState, EventName, TimerPurpose, CloseCode, SubscriptionAction
from .event_emitter import EventEmitter
from .frame_decoder import FrameDecoder, candidate_order, has_zlib_header

__all__ = [
    'ConnectionState',
    'AuthState',
    'EventName',
    'TimerPurpose',
    'CloseCode',
    'SubscriptionAction',
    'EventEmitter',
    'FrameDecoder',
    'candidate_order',
    'has_zlib_header',
]
