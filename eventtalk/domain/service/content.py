"""Comment content validation."""

from pydantic import ValidationError as PydanticValidationError

from eventtalk.domain.error import ValidationError
from eventtalk.domain.value import CommentContent


def parse_content(content: str) -> CommentContent:
    """Validate raw user input as comment content.

    Raises:
        ValidationError: If the stripped content is empty or too long
    """
    try:
        return CommentContent(content)
    except PydanticValidationError as e:
        message = e.errors()[0]["msg"].removeprefix("Value error, ")
        raise ValidationError(message) from e
