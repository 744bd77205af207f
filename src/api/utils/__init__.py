from api.utils.error_utils import handle_domain_error

__all__ = ["handle_domain_error"]
