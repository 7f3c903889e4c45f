"""
Interpolation variable protection

Replaces interpolation variables with positional placeholders before a text
is sent to a provider and puts them back afterwards. Recognized syntaxes:

- %{name}            Rails template
- %<name>s, %<n>d    Rails annotated (format type letter)
- {{name}}           i18n-js / Handlebars
- ${name}            ES6 template literal
- {name}             simple braces (not purely numeric, e.g. {1})
"""

import re
from collections import Counter
from typing import Dict, List

from localeweave.exceptions import ValidationError
from localeweave.logger import get_logger

logger = get_logger(__name__)

VARIABLE_PATTERNS = {
    "rails_template": r"%\{[^}]+\}",
    "rails_annotated": r"(?i:%<[^>]+>[a-z])",
    "i18n_js": r"\{\{[^}]+\}\}",
    "es6": r"\$\{[^}]+\}",
    "simple": r"\{[a-zA-Z_][a-zA-Z0-9_]*\}",
}

# Alternation order matters: longer syntaxes must win at the same position
COMBINED_PATTERN = re.compile("|".join(VARIABLE_PATTERNS.values()))

PLACEHOLDER_PREFIX = "__VAR_"
PLACEHOLDER_SUFFIX = "__"


class VariableExtractor:
    """
    Extracts variables from one text and restores them after translation.

    An extractor is scoped to a single translation call.

    Example:
        >>> extractor = VariableExtractor("Hello %{name}")
        >>> extractor.extract()
        'Hello __VAR_0__'
        >>> extractor.restore("Ciao __VAR_0__")
        'Ciao %{name}'
    """

    def __init__(self, text: str):
        self.original_text = text
        self.variables: List[str] = []
        self.placeholder_map: Dict[str, str] = {}

    def extract(self) -> str:
        """
        Replace every variable with a sequential placeholder.

        Returns:
            Text safe to send to a provider
        """
        if not self.original_text:
            return ""

        self.variables = []
        self.placeholder_map = {}

        def _replace(match: "re.Match") -> str:
            placeholder = f"{PLACEHOLDER_PREFIX}{len(self.variables)}{PLACEHOLDER_SUFFIX}"
            self.variables.append(match.group(0))
            self.placeholder_map[placeholder] = match.group(0)
            return placeholder

        safe_text = COMBINED_PATTERN.sub(_replace, self.original_text)
        if self.variables:
            logger.debug(f"Replaced {len(self.variables)} variables with placeholders: {self.original_text[:50]}")
        return safe_text

    def restore(self, translated_text: str, strict: bool = True) -> str:
        """
        Put the original variables back in place of their placeholders.

        Empty provider output is returned as "" without the strict check,
        even when variables were extracted. Providers reject empty replies
        before restoring, so this only affects direct callers.

        Args:
            translated_text: Provider output containing placeholders
            strict: Fail when a variable is missing or an unknown one appears

        Returns:
            Text with original variables restored

        Raises:
            ValidationError: In strict mode, when the variables do not match
        """
        if not translated_text:
            return ""

        result = translated_text
        for placeholder, original_var in self.placeholder_map.items():
            result = result.replace(placeholder, original_var)

        if strict:
            self.validate_variables(result)

        return result

    def has_variables(self) -> bool:
        return bool(self.variables)

    @property
    def variable_count(self) -> int:
        return len(self.variables)

    def validate_variables(self, text: str) -> bool:
        """
        Check that text carries exactly the extracted variables.

        Raises:
            ValidationError: Listing missing and unexpected variables
        """
        expected = Counter(self.variables)
        found = Counter(self.find_variables(text))

        missing = sorted((expected - found).elements())
        extra = sorted((found - expected).elements())

        if missing or extra:
            reasons = []
            if missing:
                reasons.append(f"Missing variables: {', '.join(missing)}")
            if extra:
                reasons.append(f"Unexpected variables: {', '.join(extra)}")
            raise ValidationError(
                f"Variable validation failed: {'; '.join(reasons)}",
                code="variable_mismatch",
                context={
                    "original_variables": list(self.variables),
                    "missing": missing,
                    "extra": extra,
                    "text": text,
                },
            )

        return True

    @staticmethod
    def find_variables(text: str) -> List[str]:
        """List the variables present in text, in order of appearance."""
        if not text:
            return []
        return COMBINED_PATTERN.findall(text)

    @staticmethod
    def contains_variables(text: str) -> bool:
        """Check whether text contains any interpolation variable."""
        if not text:
            return False
        return COMBINED_PATTERN.search(text) is not None
