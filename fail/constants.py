"""Named constants — eliminates magic strings across the codebase."""

from __future__ import annotations

THIS_KEYWORD = "this"
SUPER_KEYWORD = "super"
INITIALIZER_NAME = "init"

NONE_TEXT = "none"
TRUE_TEXT = "true"
FALSE_TEXT = "false"

ANONYMOUS_FUNCTION_TEXT = "<fn>"
FUNCTION_TEXT_TEMPLATE = "<fn {name}>"
NATIVE_FUNCTION_TEXT_TEMPLATE = "<native fn {name}>"
INSTANCE_TEXT_TEMPLATE = "{name} instance"
METACLASS_NAME_TEMPLATE = "{name} metaclass"

PROMPT = "> "

DEFAULT_MAX_CALL_DEPTH = 5000
# Python frames consumed per interpreted call, with headroom.
FRAMES_PER_CALL = 40

# Longest text a repetition may produce.
MAX_TEXT_LENGTH = 100_000_000

EXIT_OK = 0
EXIT_USAGE = 64
EXIT_STATIC_ERROR = 65
EXIT_NO_INPUT = 66
EXIT_RUNTIME_ERROR = 70
