from typing import Annotated

from pydantic import Field

ASSIGNMENT_ID = Annotated[int, Field(description="The id of the individual assignment.")]
GROUP_ASSIGNMENT_ID = Annotated[int, Field(description="The id of the group assignment.")]
GROUP_ID = Annotated[int, Field(description="The id of the group accepting the group assignment.")]
INVITEE_ID = Annotated[int, Field(description="The id of the user accepting the assignment.")]
ORGANIZATION_ID = Annotated[int, Field(description="The id of the organization in the classroom database.")]

ASSIGNMENT_REPO_ID = Annotated[int, Field(description="The id of the student's submission repository record.")]
GROUP_ASSIGNMENT_REPO_ID = Annotated[int, Field(description="The id of the group's submission repository record.")]
USER_ID = Annotated[int, Field(description="The id of the user whose credentials are used.")]
