"""Korg Volca Sample pattern model and syro pattern-data encoder."""

from .errors import (  # noqa: F401
    EncoderError,
    IOFailure,
    InvalidSelector,
    MalformedMotionInput,
    OutOfRange,
    UnknownFunction,
    UnknownParameter,
    UnsupportedPlatform,
    VolcaError,
)
from .params import (  # noqa: F401
    FUNCTION_NAMES,
    MOTION_LANE,
    PARAM_INDEX,
    PARAM_NAMES,
    PARAM_RANGE,
    Function,
)
from .part import Part, Pattern  # noqa: F401
from .layout import (  # noqa: F401
    PART_LAYOUT,
    PART_SIZE,
    PATTERN_LAYOUT,
    PATTERN_SIZE,
    decode_part,
    decode_pattern,
    encode_part,
    encode_pattern,
)
from .validate import RANDOM  # noqa: F401
from .project import PartHandle, Project  # noqa: F401
from .export import (  # noqa: F401
    ExportResult,
    export,
    find_encoder,
    list_modified_patterns,
    pattern_filename,
)
