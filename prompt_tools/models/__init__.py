from .base import Base  # noqa: F401
from .prompt import Prompt, PromptVersion  # noqa: F401
from .audit_log import AuditLog  # noqa: F401
