ExtraInfoType = dict[str, str | None]


class ServerError(Exception):
    """A request error from the GitHub Classroom server."""

    def __init__(self, message: str, extra_info: ExtraInfoType | None = None):
        msg = message
        if extra_info:
            msg += " (" + ", ".join([f"{key}: {value}" for key, value in extra_info.items() if value is not None]) + ")"
        super().__init__(msg)


class RecordNotFoundError(ServerError):
    """A classroom record the tool was asked to act on does not exist."""

    def __init__(self, record_type: str, record_id: int):
        super().__init__(message=f"{record_type} not found", extra_info={"id": str(record_id)})
