from .auth import require_basic_auth
from .error_handlers import add_error_handlers, not_found_response
from .logging import install_request_logging

__all__ = ["add_error_handlers", "install_request_logging", "not_found_response", "require_basic_auth"]
