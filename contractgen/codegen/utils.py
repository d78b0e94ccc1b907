import re
from urllib.parse import urlparse

__all__ = (
    'is_identifier',
    'is_url',
    'quote_property_name',
    'sanitize_enum_key',
    'to_kebab_case',
    'to_pascal_case',
)

_IDENTIFIER_RE = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')
_PROPERTY_NAME_RE = re.compile(r'^[A-Za-z_$][A-Za-z0-9_$]*$')


def is_url(text):
    try:
        result = urlparse(text)
        return result.scheme in ('http', 'https') and bool(result.netloc)
    except (TypeError, ValueError, AttributeError):
        return False


def is_identifier(name) -> bool:
    return isinstance(name, str) and bool(_IDENTIFIER_RE.match(name))


def to_pascal_case(name: str) -> str:
    """Convert a string to PascalCase.

    Non-alphanumeric characters act as word separators and the first letter
    of every word is upper-cased; the rest of each word is kept as-is, so
    ``userId`` becomes ``UserId`` and ``user-name`` becomes ``UserName``.

    Raises:
        ValueError: If the input is empty or not a string.
    """
    if not name or not isinstance(name, str):
        raise ValueError('to_pascal_case requires a non-empty string')

    words = re.sub(r'[^A-Za-z0-9]', ' ', name).split()
    return ''.join(word[0].upper() + word[1:] for word in words)


def to_kebab_case(name: str) -> str:
    """Convert a string to kebab-case (``UserName`` -> ``user-name``).

    Raises:
        ValueError: If the input is empty or not a string.
    """
    if not name or not isinstance(name, str):
        raise ValueError('to_kebab_case requires a non-empty string')

    kebab = re.sub(r'([a-z0-9])([A-Z])', r'\1-\2', name)
    kebab = re.sub(r'[^A-Za-z0-9]+', '-', kebab)
    return kebab.lower()


def sanitize_enum_key(value, used_keys: set[str]) -> str:
    """Turn an enum value into a member identifier unique within ``used_keys``.

    - Replace characters other than letters, digits and underscores with ``_``
    - Trim leading and trailing underscores
    - Prefix with ``_`` if it starts with a digit
    - Fall back to ``VALUE`` if nothing is left
    - Append ``_1``, ``_2``, ... until unused

    ``used_keys`` is updated with the returned key.
    """
    text = str(value).lower() if isinstance(value, bool) else str(value)
    sanitized = re.sub(r'[^A-Za-z0-9_]', '_', text).strip('_')

    if sanitized and sanitized[0].isdigit():
        sanitized = '_' + sanitized

    if not sanitized:
        sanitized = 'VALUE'

    key = sanitized
    counter = 1
    while key in used_keys:
        key = f'{sanitized}_{counter}'
        counter += 1

    used_keys.add(key)
    return key


def quote_property_name(name: str) -> str:
    """Quote an object property name unless it is a valid TS identifier."""
    if _PROPERTY_NAME_RE.match(name):
        return name
    escaped = name.replace('\\', '\\\\').replace("'", "\\'")
    return f"'{escaped}'"
