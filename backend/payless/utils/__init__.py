from payless.utils.validators import is_valid_token, is_all_zeros, format_token, validate_phone_number

__all__ = ["is_valid_token", "is_all_zeros", "format_token", "validate_phone_number"]
