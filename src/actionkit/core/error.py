# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Error types raised by ActionKit and the wire formats used to report them."""

import traceback
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from actionkit.core.status_types import StatusCodes, StatusName, http_status_code


class ErrorDetailsWireFormat(BaseModel):
    """Structured error details (stack trace, trace id, extras)."""

    model_config = ConfigDict(extra='allow', populate_by_name=True)

    stack: str | None = None
    trace_id: str | None = Field(None, alias='traceId')


class StatusErrorWireFormat(BaseModel):
    """Error body carrying a numeric status code."""

    model_config = ConfigDict(frozen=True, extra='forbid', populate_by_name=True)

    details: ErrorDetailsWireFormat | None = None
    message: str
    code: int = StatusCodes.INTERNAL.value


class HttpErrorWireFormat(BaseModel):
    """Error body returned by the flow server plugins."""

    model_config = ConfigDict(extra='allow', populate_by_name=True)

    details: Any
    message: str
    status: str = StatusCodes.INTERNAL.name


class ActionKitError(Exception):
    """Base class for every error raised by ActionKit.

    Configuration problems detected by plugins are raised as
    `ActionKitError(status='INVALID_ARGUMENT')` at construction time; failures
    inside an action are wrapped with the trace id of the failing span.
    """

    def __init__(
        self,
        *,
        message: str,
        status: StatusName | None = None,
        cause: Exception | None = None,
        details: Any = None,
        trace_id: str | None = None,
        source: str | None = None,
    ) -> None:
        """Initialize an ActionKitError.

        Args:
            message: The error message.
            status: The canonical status name. Inherited from `cause` when it
                is an `ActionKitError`, otherwise `INTERNAL`.
            cause: The underlying exception, if any.
            details: Optional details; a `stack` entry is always added.
            trace_id: Trace id of the span in which the error happened.
            source: Optional source prefix for the message.
        """
        prefix = f'{source}: ' if source else ''
        self.status: StatusName = status or (cause.status if isinstance(cause, ActionKitError) else 'INTERNAL')
        super().__init__(f'{prefix}{self.status}: {message}')
        self.original_message = message
        self.http_code = http_status_code(self.status)

        details = dict(details) if details else {}
        details.setdefault('stack', get_error_stack(cause if cause else self))
        if trace_id:
            details.setdefault('trace_id', trace_id)

        self.details = details
        self.source = source
        self.trace_id = trace_id
        self.cause = cause

    def to_callable_serializable(self) -> HttpErrorWireFormat:
        """Returns the body sent to HTTP callers."""
        return HttpErrorWireFormat(
            details=self.details,
            status=StatusCodes[self.status].name,
            message=repr(self.cause) if self.cause else self.original_message,
        )

    def to_serializable(self) -> StatusErrorWireFormat:
        """Returns the body with a numeric status code."""
        return StatusErrorWireFormat(
            details=self.details,
            code=StatusCodes[self.status].value,
            message=repr(self.cause) if self.cause else self.original_message,
        )


class UserFacingError(ActionKitError):
    """Error whose message is safe to return to end users.

    Server plugins return the message of this error verbatim. Any other error
    is reported with its status and a stack trace in the details.
    """

    def __init__(self, status: StatusName, message: str, details: Any = None) -> None:
        super().__init__(status=status, message=message, details=details)


def get_http_status(error: Any) -> int:
    """Returns the HTTP status for an error; 500 for foreign exceptions."""
    if isinstance(error, ActionKitError):
        return error.http_code
    return 500


def get_reflection_json(error: Any) -> StatusErrorWireFormat:
    """Returns the numeric-status wire format for any error."""
    if isinstance(error, ActionKitError):
        return error.to_serializable()
    return StatusErrorWireFormat(
        message=str(error),
        code=StatusCodes.INTERNAL.value,
        details=ErrorDetailsWireFormat(stack=get_error_stack(error)),
    )


def get_callable_json(error: Any) -> HttpErrorWireFormat:
    """Returns the HTTP wire format for any error."""
    if isinstance(error, ActionKitError):
        return error.to_callable_serializable()
    return HttpErrorWireFormat(
        message=str(error),
        status=StatusCodes.INTERNAL.name,
        details={'stack': get_error_stack(error)},
    )


def get_error_stack(error: BaseException) -> str | None:
    """Formats the traceback attached to an exception."""
    if isinstance(error, BaseException):
        return ''.join(traceback.format_tb(error.__traceback__))
    return None
