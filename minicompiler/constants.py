"""Named constants shared across the package."""

from __future__ import annotations

LANGUAGE_C = "c"
LANGUAGE_JAVASCRIPT = "javascript"

GLOBAL_SCOPE = "global"

# Edge labels between a node and its parent in the structural tree
REL_DECLARATION = "declaration"
REL_PARAMETER = "parameter"
REL_BODY = "body"
REL_STATEMENT = "statement"
REL_INITIALIZER = "initializer"
REL_CONDITION = "condition"
REL_THEN = "then"
REL_ELSE = "else"
REL_INITIALIZATION = "initialization"
REL_TEST = "test"
REL_UPDATE = "update"
REL_VALUE = "value"
REL_ARGUMENT = "argument"
REL_CHILD = "child"

PARAM_FALLBACK_TEMPLATE = "param{index}"

# Pseudo memory addresses (illustrative only, never a real allocation)
PSEUDO_GLOBAL_MODULUS = 0xFFFF
PSEUDO_GLOBAL_BASE = 0x1000
PSEUDO_STACK_MODULUS = 128
PSEUDO_GLOBAL_TEMPLATE = "0x{value:X}"
PSEUDO_STACK_TEMPLATE = "SP+{value}"

C_KEYWORDS: frozenset[str] = frozenset(
    {
        "break",
        "case",
        "continue",
        "default",
        "do",
        "else",
        "for",
        "goto",
        "if",
        "return",
        "sizeof",
        "switch",
        "typedef",
        "while",
    }
)

COMPILER_DIAGNOSTIC_PATTERN = (
    r"^([^:\n]+):(\d+):(\d+):\s+(fatal error|error|warning):\s+(.+)$"
)
NODE_LOCATION_PATTERN = r"^\S*\.js:(\d+)\s*$"
NODE_ERROR_PATTERN = r"^(\w*Error): (.*)$"

EXECUTION_TIMED_OUT = "execution timed out"
COMPILATION_TIMED_OUT = "compilation timed out"

DEFAULT_C_COMPILER = "gcc"
DEFAULT_JS_RUNTIME = "node"
DEFAULT_COMPILE_TIMEOUT = 10.0
DEFAULT_RUN_TIMEOUT = 5.0

TEMP_DIR_PREFIX = "minicompiler-"
C_SOURCE_FILENAME = "program.c"
C_EXECUTABLE_FILENAME = "program"
JS_SOURCE_FILENAME = "program.js"

SUPPORTED_LANGUAGES: tuple[str, ...] = (
    LANGUAGE_C,
    LANGUAGE_JAVASCRIPT,
)
