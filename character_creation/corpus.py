import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping

log = logging.getLogger(__name__)

CORPUS_DOCUMENTS = ["backgrounds", "books", "classes", "life", "names", "npcs", "other", "races"]
DARK_DAWN_DOCUMENTS = {
    "races": "races",
    "factions": "factions",
    "deities": "deities",
    "classes": "classes",
    "special_abilities": "special-abilities",
}


@dataclass(frozen=True)
class Corpus:
    """The read-only data the engine queries. Never mutated by generation."""

    races: Dict[str, Any]
    classes: Dict[str, Any]
    backgrounds: Dict[str, Any]
    names: Dict[str, Any]
    life: Dict[str, Any]
    npcs: Dict[str, Any]
    other: Dict[str, Any]
    books: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_documents(cls, documents: Mapping[str, Any]) -> "Corpus":
        return cls(
            races=documents.get("races") or {},
            classes=documents.get("classes") or {},
            backgrounds=documents.get("backgrounds") or {},
            names=documents.get("names") or {},
            life=documents.get("life") or {},
            npcs=documents.get("npcs") or {},
            other=documents.get("other") or {},
            books=documents.get("books") or {},
        )

    @property
    def available_books(self) -> List[str]:
        return list(self.books.get("availableBooks", []))

    @property
    def genders(self) -> List[str]:
        return list(self.other.get("genders", []))


@dataclass(frozen=True)
class DarkDawnCorpus:
    races: Dict[str, Any]
    factions: Dict[str, Any]
    deities: Dict[str, Any]
    classes: Dict[str, Any]
    special_abilities: Dict[str, Any]

    @classmethod
    def from_documents(cls, documents: Mapping[str, Any]) -> "DarkDawnCorpus":
        return cls(**{name: documents.get(name) or {} for name in DARK_DAWN_DOCUMENTS})


def _load_document(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_corpus(data_dir: Path) -> Corpus:
    documents = {}
    for name in CORPUS_DOCUMENTS:
        path = data_dir / f"{name}.json"
        if name == "books" and not path.exists():
            log.warning("No books catalog at %s; only universal books are available", path)
            continue
        documents[name] = _load_document(path)
    log.debug("Loaded corpus from %s (%s races)", data_dir, len(documents.get("races", {})))
    return Corpus.from_documents(documents)


def load_dark_dawn_corpus(data_dir: Path) -> DarkDawnCorpus:
    documents = {
        name: _load_document(data_dir / f"{filename}.json") for name, filename in DARK_DAWN_DOCUMENTS.items()
    }
    return DarkDawnCorpus.from_documents(documents)
