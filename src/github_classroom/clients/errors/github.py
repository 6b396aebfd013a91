ExtraInfoType = dict[str, str | None]


class ClientError(Exception):
    """An error from the GitHub Classroom client."""

    def __init__(self, message: str, extra_info: ExtraInfoType | None = None):
        msg = message
        if extra_info:
            msg += " (" + ", ".join([f"{key}: {value}" for key, value in extra_info.items() if value is not None]) + ")"
        super().__init__(msg)


class RequestError(ClientError):
    """A request to GitHub failed."""

    def __init__(self, action: str, message: str | None = None, extra_info: ExtraInfoType | None = None):
        if not extra_info:
            extra_info = {}
        super().__init__(message="A request error occured.", extra_info={"action": action, "message": message, **extra_info})


class ResourceNotFoundError(RequestError):
    """The resource or membership does not exist on GitHub."""

    def __init__(self, action: str, resource: str | None = None, extra_info: ExtraInfoType | None = None):
        if not extra_info:
            extra_info = {}
        super().__init__(
            action=action,
            message="The resource could not be found.",
            extra_info={"resource": resource, **extra_info},
        )


class ForbiddenError(RequestError):
    """The token does not carry the scopes required for the request."""

    def __init__(self, action: str, resource: str | None = None, extra_info: ExtraInfoType | None = None):
        if not extra_info:
            extra_info = {}
        super().__init__(
            action=action,
            message="The token is not allowed to access the resource.",
            extra_info={"resource": resource, **extra_info},
        )


class PlanUnavailableError(RequestError):
    """The organization plan could not be read with the current token."""

    def __init__(self, organization_id: int):
        super().__init__(
            action="Get organization plan",
            message="Cannot retrieve this organizations repo plan, please reauthenticate your token.",
            extra_info={"organization_id": str(organization_id)},
        )


class UnknownOperationError(ClientError):
    """The attribute has no local definition and is absent from the remote resource."""

    def __init__(self, name: str, resource_type: str):
        super().__init__(message=f"undefined {name} for {resource_type}")
        self.name: str = name
        self.resource_type: str = resource_type
