"""Application error type and code tables."""

import inspect
from enum import Enum, IntEnum
from uuid import uuid4


class HttpStatusCode(IntEnum):
    OK = 200
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    CONFLICT = 409
    UNPROCESSABLE_ENTITY = 422
    TOO_MANY_REQUESTS = 429
    INTERNAL_SERVER_ERROR = 500
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503


class AppErrorCode(str, Enum):
    E_INTERNAL_ERROR = "E_INTERNAL_ERROR"
    E_INVALID_REQUEST = "E_INVALID_REQUEST"
    E_INVALID_PARAMS = "E_INVALID_PARAMS"
    E_BAD_TOKEN = "E_BAD_TOKEN"

    # Platform credential / account
    E_PLATFORM_NOT_CONNECTED = "E_PLATFORM_NOT_CONNECTED"
    E_PLATFORM_AUTH = "E_PLATFORM_AUTH"
    E_PLATFORM_RATE_LIMITED = "E_PLATFORM_RATE_LIMITED"
    E_PLATFORM_UNAVAILABLE = "E_PLATFORM_UNAVAILABLE"
    E_PLATFORM_REJECTED = "E_PLATFORM_REJECTED"

    # Broadcast lifecycle
    E_BROADCAST_NOT_FOUND = "E_BROADCAST_NOT_FOUND"
    E_INVALID_TRANSITION = "E_INVALID_TRANSITION"
    E_STREAM_INACTIVE = "E_STREAM_INACTIVE"
    E_PROVISION_FAILED = "E_PROVISION_FAILED"

    def __str__(self) -> str:
        return self.value


class AppError(Exception):
    """Error raised by domain and service code, rendered by `app_error_handler`.

    The caller location and a short reference id are captured at construction
    so the handler can log where the error originated.
    """

    def __init__(
        self,
        errcode: AppErrorCode | str = AppErrorCode.E_INTERNAL_ERROR,
        errmesg: str = "We are sorry, an error occurred.",
        status_code: int = HttpStatusCode.INTERNAL_SERVER_ERROR,
    ):
        super().__init__(errmesg)
        self.errcode = errcode.value if isinstance(errcode, AppErrorCode) else str(errcode)
        self.errmesg = errmesg
        self.status_code = int(status_code)
        self.erresid = uuid4().hex[:10]
        self.caller_info = self._capture_caller()

    def _capture_caller(self) -> str:
        frame = inspect.currentframe()
        try:
            caller = frame.f_back if frame else None
            # Skip frames belonging to AppError subclasses' constructors
            while caller and caller.f_code.co_name in {"__init__", "_capture_caller"}:
                caller = caller.f_back
            if caller is None:
                return "unknown"
            module = caller.f_globals.get("__name__", caller.f_code.co_filename)
            return f"{module}:{caller.f_code.co_name}:{caller.f_lineno}"
        finally:
            del frame

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.errcode!r}, {self.errmesg!r}, {self.status_code})"
