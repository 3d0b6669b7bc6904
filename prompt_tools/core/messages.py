"""Error messages and user-facing text for the backend."""

# Authentication messages
AUTH_INVALID_CREDENTIALS = "Could not validate credentials"
AUTH_TOKEN_PAYLOAD_INVALID = "Invalid token payload"

# Prompt messages
PROMPT_NOT_FOUND = "Prompt not found"
PROMPT_VERSION_NOT_FOUND = "Version not found"
PROMPT_VERSION_CONFLICT = "Version already exists for this prompt, reload and try again"
PROMPT_INVALID_ID = "Invalid prompt ID"
PROMPT_DELETED = "Prompt deleted"

# Import / export messages
IMPORT_INVALID_FORMAT = "Invalid import file"
IMPORT_SUCCESS = "Import completed"

# General error messages
ERROR_INTERNAL_SERVER = "Internal server error"
ERROR_NOT_FOUND = "Resource not found"
ERROR_BAD_REQUEST = "Invalid request"
