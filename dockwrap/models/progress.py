"""Progress records emitted by image pull, push and build streams.

The engine writes one JSON object per line for every progress event. Two
shapes share that stream: pull/push records and build records. Both
implement the ``ProgressRecord`` capability used by the message
aggregator.
"""

from typing import (
    Annotated,
    Any,
    Dict,
    Iterable,
    Iterator,
    Protocol,
    Type,
    TypeVar,
    Union,
    runtime_checkable,
)

from docker.utils.json_stream import split_buffer
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError

from .errors import ProgressDecodeError

RawMessage = Union[str, bytes, bytearray, Dict[str, Any]]

# The engine occasionally sends explicit nulls
Text = Annotated[str, BeforeValidator(lambda v: "" if v is None else v)]
# and null sub-objects
NullAsEmpty = BeforeValidator(lambda v: {} if v is None else v)


@runtime_checkable
class ProgressRecord(Protocol):
    """Anything the aggregator can render."""

    id: str

    def message(self) -> str:
        ...

    def has_id(self) -> bool:
        ...


class ProgressErrorDetail(BaseModel):
    """The ``errorDetail`` object of a failed step."""

    model_config = ConfigDict(extra="ignore")

    message: Text = ""


class PullPushMessage(BaseModel):
    """One line of an image pull or push stream."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    status: Text = ""
    progress: Text = ""
    id: Text = ""
    error_detail: Annotated[ProgressErrorDetail, NullAsEmpty] = Field(
        default_factory=ProgressErrorDetail, alias="errorDetail"
    )

    def message(self) -> str:
        if self.error_detail.message:
            return self.error_detail.message
        if self.id:
            return f"{self.id}: {self.status} {self.progress}"
        return f"{self.status} {self.progress}"

    def has_id(self) -> bool:
        return self.id != ""


class BuildAux(BaseModel):
    """The ``aux`` object of a build stream, e.g. the resulting image id."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    image_id: Text = Field(default="", alias="ID")


class BuildMessage(BaseModel):
    """One line of an image build stream.

    Build lines carry free text log output in ``stream`` and the final
    image digest in ``aux.ID``, in addition to the pull-style fields used
    while base layers are fetched.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    status: Text = ""
    progress: Text = ""
    id: Text = ""
    stream: Text = ""
    aux: Annotated[BuildAux, NullAsEmpty] = Field(default_factory=BuildAux)
    error_detail: Annotated[ProgressErrorDetail, NullAsEmpty] = Field(
        default_factory=ProgressErrorDetail, alias="errorDetail"
    )

    def message(self) -> str:
        if self.error_detail.message:
            return self.error_detail.message
        if self.stream:
            return self.stream
        if self.aux.image_id:
            return self.aux.image_id
        if self.id:
            return f"{self.id}: {self.status} {self.progress}"
        return f"{self.status} {self.progress}"

    def has_id(self) -> bool:
        return self.id != ""


M = TypeVar("M", PullPushMessage, BuildMessage)


def _parse(model: Type[M], data: RawMessage, strict: bool) -> M:
    try:
        if isinstance(data, dict):
            return model.model_validate(data)
        return model.model_validate_json(data)
    except ValidationError as e:
        if not strict:
            return model()
        if isinstance(data, (bytes, bytearray)):
            line = data.decode("utf-8", errors="replace")
        else:
            line = str(data)
        raise ProgressDecodeError(
            f"cannot decode {model.__name__}: {e.errors()[0]['msg']}", line=line
        ) from e


def parse_pull_push_message(data: RawMessage, strict: bool = True) -> PullPushMessage:
    """Decode one pull/push progress line.

    Args:
        data: JSON text, raw bytes, or an already decoded dict
        strict: Raise ProgressDecodeError on malformed input instead of
            returning an empty record

    Returns:
        The decoded record
    """
    return _parse(PullPushMessage, data, strict)


def parse_build_message(data: RawMessage, strict: bool = True) -> BuildMessage:
    """Decode one build progress line. See parse_pull_push_message."""
    return _parse(BuildMessage, data, strict)


def iter_json_lines(chunks: Iterable[Union[bytes, str]]) -> Iterator[str]:
    """Split raw response chunks into non-blank JSON lines.

    Chunks from the SDK do not align with line boundaries; a chunk may hold
    several lines or part of one.
    """
    for line in split_buffer(chunks):
        line = line.strip()
        if line:
            yield line
