"""
Language code tables and filename utilities.

Locale codes are lower-case BCP 47 style tags: a language and an optional region
joined by a hyphen (en, de-at, fr-ca).

XLIFF File Naming Convention:
Each exported file holds one domain in one target language and is named
'{domain}.{language_code}.xliff'. For example:
- Domain 'homepage' in German maps to 'homepage.de.xliff'
- Domain 'help' in Swiss German maps to 'help.de-ch.xliff'
The get_xliff_file_name() and parse_xliff_file_name() functions handle this mapping.
"""

import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple

XLIFF_EXTENSION = "xliff"

LANGUAGE_CODE_PATTERN = re.compile(r"^[a-z]{2,3}(-[a-z0-9]{2,8})*$")

# Languages seeded by the first schema migration on every back-end
BASE_LANGUAGES: List[Tuple[str, str]] = [
    ("de", "German"),
    ("en", "English"),
    ("es", "Spanish"),
    ("fr", "French"),
    ("it", "Italian"),
    ("pl", "Polish"),
    ("de-at", "German (Austria)"),
    ("de-ch", "German (Switzerland)"),
    ("de-de", "German (Germany)"),
    ("en-au", "English (Australia)"),
    ("en-ca", "English (Canada)"),
    ("en-gb", "English (UK)"),
    ("en-bh", "English (Bahrain)"),
    ("en-us", "English (US)"),
    ("en-za", "English (South Africa)"),
    ("fr-ca", "French (Canada)"),
    ("pt", "Portuguese"),
    ("en-ie", "English (Ireland)"),
    ("cs", "Czech"),
    ("hu", "Hungarian"),
    ("es-us", "Spanish (US)"),
]

# Additional regional variants seeded only on PostgreSQL
EXTENDED_LANGUAGES: List[Tuple[str, str]] = [
    ("nl", "Dutch"),
    ("en-nl", "English (NL)"),
    ("nl-be", "Dutch (BE)"),
    ("en-ch", "English (CH)"),
    ("es-ar", "Spanish (AR)"),
    ("es-cl", "Spanish (CL)"),
    ("es-mx", "Spanish (MX)"),
    ("es-pe", "Spanish (PE)"),
    ("fr-ch", "French (CH)"),
    ("es-co", "Spanish (CO)"),
    ("en-be", "English (BE)"),
    ("en-cz", "English (CZ)"),
    ("en-hu", "English (HU)"),
    ("en-pl", "English (PL)"),
    ("fr-be", "French (BE)"),
    ("it-ch", "Italian (CH)"),
    ("en-at", "English (AT)"),
    ("en-es", "English (ES)"),
    ("en-fr", "English (FR)"),
    ("en-it", "English (IT)"),
    ("de-be", "German (BE)"),
    ("de-es", "German (ES)"),
    ("en-ar", "English (AR)"),
    ("en-cl", "English (CL)"),
    ("en-co", "English (CO)"),
    ("en-de", "English (DE)"),
    ("en-mx", "English (MX)"),
    ("en-pe", "English (PE)"),
]

SEED_LANGUAGE_NAMES: Dict[str, str] = dict(BASE_LANGUAGES + EXTENDED_LANGUAGES)


def normalize_language_code(code: str) -> str:
    """
    Normalize a locale code to the stored form.

    Examples:
        >>> normalize_language_code('de_AT')
        'de-at'
        >>> normalize_language_code(' EN ')
        'en'
    """
    return code.strip().replace("_", "-").lower()


def is_valid_language_code(code: str) -> bool:
    """
    Check if a language code is well formed (not whether it is registered).

    Examples:
        >>> is_valid_language_code('de-ch')
        True
        >>> is_valid_language_code('de.ch')
        False
    """
    return bool(code) and LANGUAGE_CODE_PATTERN.match(code) is not None


def get_language_name(code: str) -> Optional[str]:
    """Get the seeded display name for a code, or None."""
    return SEED_LANGUAGE_NAMES.get(code)


def get_xliff_file_name(domain_name: str, language_code: str) -> str:
    """
    Get the export filename for a domain in one target language.

    Examples:
        >>> get_xliff_file_name('homepage', 'de')
        'homepage.de.xliff'
    """
    return f"{domain_name}.{language_code}.{XLIFF_EXTENSION}"


def parse_xliff_file_name(filename: str) -> Optional[Tuple[str, str]]:
    """
    Extract (domain name, language code) from an XLIFF filename.

    The name must have exactly three dot-separated parts: domain, language and
    the xliff extension.

    Examples:
        >>> parse_xliff_file_name('/in/help.de-ch.xliff')
        ('help', 'de-ch')
        >>> parse_xliff_file_name('help.xliff') is None
        True
        >>> parse_xliff_file_name('my.help.de.xliff') is None
        True
    """
    parts = Path(filename).name.split(".")
    if len(parts) != 3 or parts[2] != XLIFF_EXTENSION:
        return None

    domain_name, language_code = parts[0], parts[1]
    if not domain_name or not language_code:
        return None

    return domain_name, language_code
