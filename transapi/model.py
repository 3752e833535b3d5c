"""
Translation Domain Model

Defines the Language value type and the minimal read contract shared by every
representation of a domain (rows assembled by the data store, units decoded from
an XLIFF file):

- Domain: a name and a list of strings
- String: a name and a mapping of Language -> Translation
- Translation: content text
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol


@dataclass(frozen=True)
class Language:
    """A locale. Identity is the code alone; id and name are informational."""
    code: str
    name: str = field(default="", compare=False)
    id: Optional[int] = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "code": self.code, "name": self.name}


class Translation(Protocol):
    content: str


class String(Protocol):
    name: str
    translations: Dict[Language, Translation]


class Domain(Protocol):
    name: str
    strings: List[String]


@dataclass
class TranslationRecord:
    """Translation content as stored in the database."""
    content: str
    id: Optional[int] = None


@dataclass
class StringRecord:
    """String with its translations as stored in the database."""
    name: str
    id: Optional[int] = None
    translations: Dict[Language, TranslationRecord] = field(default_factory=dict)


@dataclass
class DomainRecord:
    """Domain assembled from database rows."""
    name: str
    strings: List[StringRecord] = field(default_factory=list)


def get_translation(string: String, language: Language) -> Optional[Translation]:
    """Return the translation of a string for a language, or None."""
    return string.translations.get(language)


def domain_to_dict(domain: Domain) -> Dict[str, Any]:
    """Convert any Domain into a JSON-safe dict keyed by language code."""
    return {
        "name": domain.name,
        "strings": [
            {
                "name": s.name,
                "translations": {
                    lang.code: {"content": t.content}
                    for lang, t in s.translations.items()
                },
            }
            for s in domain.strings
        ],
    }
