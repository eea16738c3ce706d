"""
Secret masking for progress lines and logs.

Credentials end up in the build variables and the resolved configuration;
any text written to the output sink or the log is passed through a masker so
the secret values are replaced with '***'.
"""

import logging
import re
from typing import Any, Dict, Iterable, Set


class SecretMasker:
    """Replaces known secret values in text."""

    def __init__(self, values: Iterable[str] = ()):
        self._masked_values: Set[str] = set()
        self.add(*values)

    def add(self, *values: str) -> None:
        """Register values to mask. Empty values are ignored."""
        for value in values:
            if value:
                self._masked_values.add(value)

    def copy(self) -> "SecretMasker":
        """Return an independent masker holding the same values."""
        return SecretMasker(set(self._masked_values))

    def mask_text(self, text: str) -> str:
        """
        Mask known secret values in text.

        Args:
            text: Text potentially containing secrets

        Returns:
            Text with secrets replaced by '***'
        """
        if not text or not self._masked_values:
            return text

        masked = text
        # Longer values first so a secret containing another is masked whole
        for secret_value in sorted(self._masked_values, key=len, reverse=True):
            if secret_value in masked:
                masked = re.sub(re.escape(secret_value), '***', masked)

        return masked

    def mask_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Mask secrets in the string values of a (nested) dictionary."""
        if not data or not self._masked_values:
            return data

        masked = {}
        for key, value in data.items():
            if isinstance(value, str):
                masked[key] = self.mask_text(value)
            elif isinstance(value, dict):
                masked[key] = self.mask_dict(value)
            else:
                masked[key] = value

        return masked


class SecretsMaskingFilter(logging.Filter):
    """Logging filter that masks secrets in log records."""

    def __init__(self, masker: SecretMasker):
        super().__init__()
        self.masker = masker

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self.masker.mask_text(str(record.msg))

        if record.args:
            if isinstance(record.args, dict):
                record.args = self.masker.mask_dict(record.args)
            elif isinstance(record.args, tuple):
                record.args = tuple(
                    self.masker.mask_text(arg) if isinstance(arg, str) else arg
                    for arg in record.args
                )

        return True
