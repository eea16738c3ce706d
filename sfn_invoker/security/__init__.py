"""Security module for secret masking."""

from .masking import SecretMasker, SecretsMaskingFilter

__all__ = ['SecretMasker', 'SecretsMaskingFilter']
