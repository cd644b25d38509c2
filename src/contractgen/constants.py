"""
Shared constants across contractgen modules.

This module is the single source of truth for:
- Type kinds and primitive names accepted in contract documents
- Target option vocabularies (naming, dates, nullability)
- Target names, aliases and per-target defaults
"""

# =============================================================================
# TYPE KINDS
# =============================================================================

KIND_PRIMITIVE = "primitive"
KIND_OBJECT = "object"
KIND_ENUM = "enum"
KIND_ARRAY = "array"
KIND_MAP = "map"

TYPE_KINDS = {KIND_PRIMITIVE, KIND_OBJECT, KIND_ENUM, KIND_ARRAY, KIND_MAP}

# Container kinds carry an element reference instead of a name
CONTAINER_KINDS = {KIND_ARRAY, KIND_MAP}


# =============================================================================
# PRIMITIVES
# =============================================================================

PRIM_STRING = "string"
PRIM_INTEGER = "integer"
PRIM_LONG = "long"
PRIM_NUMBER = "number"
PRIM_BOOLEAN = "boolean"
PRIM_DATE = "date"
PRIM_DATETIME = "datetime"
PRIM_UUID = "uuid"
PRIM_BINARY = "binary"
PRIM_ANY = "any"

PRIMITIVES = {
    PRIM_STRING,
    PRIM_INTEGER,
    PRIM_LONG,
    PRIM_NUMBER,
    PRIM_BOOLEAN,
    PRIM_DATE,
    PRIM_DATETIME,
    PRIM_UUID,
    PRIM_BINARY,
    PRIM_ANY,
}

# Primitives governed by TargetConfig.date_representation
DATE_PRIMITIVES = {PRIM_DATE, PRIM_DATETIME}

# Common spellings found in hand-written contracts
PRIMITIVE_ALIASES = {
    "str": PRIM_STRING,
    "int": PRIM_INTEGER,
    "int32": PRIM_INTEGER,
    "int64": PRIM_LONG,
    "float": PRIM_NUMBER,
    "double": PRIM_NUMBER,
    "bool": PRIM_BOOLEAN,
    "date-time": PRIM_DATETIME,
    "timestamp": PRIM_DATETIME,
    "object": PRIM_ANY,
}


# =============================================================================
# OPERATIONS
# =============================================================================

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")
PARAMETER_LOCATIONS = ("path", "query", "header")
DEFAULT_TAG = "default"


# =============================================================================
# TARGET OPTIONS
# =============================================================================

NAMING_CAMEL = "camelCase"
NAMING_SNAKE = "snake_case"
NAMING_PASCAL = "PascalCase"
NAMING_UPPER_SNAKE = "UPPER_SNAKE_CASE"
NAMING_PRESERVE = "preserve"

NAMING_CONVENTIONS = (
    NAMING_CAMEL,
    NAMING_SNAKE,
    NAMING_PASCAL,
    NAMING_UPPER_SNAKE,
    NAMING_PRESERVE,
)

DATE_EPOCH = "epoch"
DATE_ISO8601 = "iso8601"
DATE_NATIVE = "native"

DATE_REPRESENTATIONS = (DATE_EPOCH, DATE_ISO8601, DATE_NATIVE)

NULLABILITY_OPTIONAL_WRAPPER = "optionalWrapper"
NULLABILITY_NULLABLE_FIELD = "nullableField"

NULLABILITY_POLICIES = (NULLABILITY_OPTIONAL_WRAPPER, NULLABILITY_NULLABLE_FIELD)

# Options understood for every target
COMMON_OPTIONS = {
    "namingConvention",
    "dateRepresentation",
    "nullabilityPolicy",
    "packageName",
    "version",
    "registryUrl",
    "repositoryUrl",
    "description",
}


# =============================================================================
# TARGETS
# =============================================================================

TARGET_JAVA = "java"
TARGET_TYPESCRIPT = "typescript"
TARGET_PYTHON = "python"
TARGET_GO = "go"

TARGETS = (TARGET_JAVA, TARGET_TYPESCRIPT, TARGET_PYTHON, TARGET_GO)

TARGET_ALIASES = {
    "ts": TARGET_TYPESCRIPT,
    "typescript-axios": TARGET_TYPESCRIPT,
    "py": TARGET_PYTHON,
    "spring": TARGET_JAVA,
    "golang": TARGET_GO,
}

# Options understood only by one target
TARGET_OPTIONS = {
    TARGET_JAVA: {"groupId", "artifactId", "modelPackage", "apiPackage"},
    TARGET_TYPESCRIPT: {"npmName", "enumNaming"},
    TARGET_PYTHON: {"projectName"},
    TARGET_GO: {"modulePath"},
}

TARGET_DEFAULTS = {
    TARGET_JAVA: {
        "namingConvention": NAMING_CAMEL,
        "dateRepresentation": DATE_NATIVE,
        "nullabilityPolicy": NULLABILITY_NULLABLE_FIELD,
        "packageName": "com.example.contract",
        "registryUrl": "https://repo.maven.apache.org/maven2",
    },
    TARGET_TYPESCRIPT: {
        "namingConvention": NAMING_CAMEL,
        "dateRepresentation": DATE_ISO8601,
        "nullabilityPolicy": NULLABILITY_OPTIONAL_WRAPPER,
        "packageName": "contract-client",
        "registryUrl": "https://registry.npmjs.org",
        "enumNaming": "UPPERCASE",
    },
    TARGET_PYTHON: {
        "namingConvention": NAMING_SNAKE,
        "dateRepresentation": DATE_NATIVE,
        "nullabilityPolicy": NULLABILITY_OPTIONAL_WRAPPER,
        "packageName": "contract_models",
        "registryUrl": "https://upload.pypi.org/legacy/",
    },
    TARGET_GO: {
        "namingConvention": NAMING_PASCAL,
        "dateRepresentation": DATE_NATIVE,
        "nullabilityPolicy": NULLABILITY_NULLABLE_FIELD,
        "packageName": "contract",
        "registryUrl": "https://proxy.golang.org",
    },
}

DEFAULT_VERSION = "0.1.0"

# Environment variables referenced (never read) by publish descriptors
AUTH_ENV_BY_TARGET = {
    TARGET_JAVA: ("GITHUB_ACTOR", "GITHUB_TOKEN"),
    TARGET_TYPESCRIPT: ("NODE_AUTH_TOKEN",),
    TARGET_PYTHON: ("TWINE_USERNAME", "TWINE_PASSWORD"),
    TARGET_GO: (),
}


# =============================================================================
# OUTPUT
# =============================================================================

DESCRIPTOR_FILENAME = "contractgen.json"
STAGING_PREFIX = ".contractgen-staging-"
RETIRED_PREFIX = ".contractgen-retired-"

GENERATED_HEADER = "Generated by contractgen. Do not edit."

DEFAULT_TIMEOUT_SECONDS = 60.0


# =============================================================================
# RUN STATES
# =============================================================================

STATE_IDLE = "IDLE"
STATE_LOADING = "LOADING"
STATE_NORMALIZING = "NORMALIZING"
STATE_EMITTING = "EMITTING"
STATE_ASSEMBLING = "ASSEMBLING"
STATE_DONE = "DONE"
STATE_FAILED = "FAILED"

STATUS_PENDING = "PENDING"
STATUS_EMITTING = "EMITTING"
STATUS_ASSEMBLING = "ASSEMBLING"
STATUS_SUCCEEDED = "SUCCEEDED"
STATUS_FAILED = "FAILED"
STATUS_TIMED_OUT = "TIMED_OUT"

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_PARTIAL = 2
