"""Error taxonomy for calls to the remote word service and engine misuse."""

from typing import Optional


class ServiceError(Exception):
    """A call to the remote service failed; never fatal to the process."""

    message = "远程服务请求失败"

    def __init__(self, detail: str = "", status_code: Optional[int] = None):
        self.detail = detail
        self.status_code = status_code
        super().__init__(detail or self.message)


class FetchFailed(ServiceError):
    message = "获取数据失败"


class SubmissionFailed(ServiceError):
    message = "提交失败，请重试"


class CheckInFailed(ServiceError):
    message = "签到失败，请稍后重试"


class InvalidTransition(Exception):
    """An engine operation was called in a state that does not allow it."""
