import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

import jsonschema
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from character_creation.books import UNIVERSAL_BOOKS, resolve_used_books
from character_creation.content import selectable_entries
from character_creation.context import GenerationContext
from character_creation.corpus import Corpus, DarkDawnCorpus, load_corpus, load_dark_dawn_corpus
from character_creation.darkdawn import generate_dark_dawn
from character_creation.errors import GenerationError
from character_creation.generate import STAGES, apply_stage, generate_all
from character_creation.randomizer import Randomizer
from character_creation.validators import validate_dark_dawn_character, validate_final_character

from .config import Settings, get_settings
from .models import BooksResponse, DarkDawnRequest, ErrorEnvelope, GenerateRequest, StageResponse

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
log = logging.getLogger(__name__)

app = FastAPI(
    title="Character Generator Service",
    description="Random D&D 5e characters with locks, book filters and biographies",
)

COLLECTIONS = ("races", "classes", "backgrounds")


def get_settings_dep() -> Settings:
    return get_settings()


@lru_cache(maxsize=4)
def _cached_corpus(data_path: Path) -> Corpus:
    log.info("Loading corpus from %s", data_path)
    return load_corpus(data_path)


@lru_cache(maxsize=4)
def _cached_dark_dawn_corpus(data_path: Path) -> DarkDawnCorpus:
    log.info("Loading Dark Dawn corpus from %s", data_path)
    return load_dark_dawn_corpus(data_path)


def get_corpus(settings: Settings = Depends(get_settings_dep)) -> Corpus:
    return _cached_corpus(settings.data_path)


def get_dark_dawn_corpus(settings: Settings = Depends(get_settings_dep)) -> DarkDawnCorpus:
    return _cached_dark_dawn_corpus(settings.darkdawn_path)


def clear_corpus_cache() -> None:
    _cached_corpus.cache_clear()
    _cached_dark_dawn_corpus.cache_clear()


@app.exception_handler(GenerationError)
def generation_error_handler(request: Request, exc: GenerationError) -> JSONResponse:
    log.warning("Generation failed on %s: %s", request.url.path, exc.message)
    envelope = ErrorEnvelope(code=exc.code, message=exc.message, details=exc.details or None)
    return JSONResponse(status_code=422, content=envelope.model_dump())


@app.exception_handler(jsonschema.ValidationError)
def invalid_output_handler(request: Request, exc: jsonschema.ValidationError) -> JSONResponse:
    log.error("Generated record failed schema validation: %s", exc.message)
    envelope = ErrorEnvelope(
        code="invalid_output",
        message=exc.message,
        details={"path": [str(part) for part in exc.absolute_path]},
    )
    return JSONResponse(status_code=500, content=envelope.model_dump())


def _context(request: GenerateRequest, corpus: Corpus, settings: Settings) -> GenerationContext:
    options = request.to_options(settings.default_books, settings.ethnicity_mode, settings.race_mode)
    rng = Randomizer(request.seed, max_attempts=settings.max_draw_attempts)
    return GenerationContext.build(corpus, options, rng, request.previous)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/books")
def books(
    corpus: Corpus = Depends(get_corpus),
    settings: Settings = Depends(get_settings_dep),
) -> BooksResponse:
    return BooksResponse(
        available=corpus.available_books,
        universal=list(UNIVERSAL_BOOKS),
        default=list(resolve_used_books(settings.default_books, corpus.available_books or None)),
    )


@app.get("/options/{collection}")
def options(
    collection: str,
    books: Optional[List[str]] = Query(None),
    corpus: Corpus = Depends(get_corpus),
    settings: Settings = Depends(get_settings_dep),
) -> List[str]:
    if collection not in COLLECTIONS:
        raise HTTPException(status_code=404, detail="Collection not found")
    used_books = resolve_used_books(books or settings.default_books, corpus.available_books or None)
    return selectable_entries(getattr(corpus, collection), used_books)


@app.get("/schemas/{schema_name}")
def get_schema(schema_name: str, settings: Settings = Depends(get_settings_dep)) -> dict:
    schema_path = settings.schemas_path / f"{schema_name}.schema.json"
    if not schema_path.exists():
        raise HTTPException(status_code=404, detail="Schema not found")
    with schema_path.open(encoding="utf-8") as f:
        return json.load(f)


@app.post("/characters")
def create_character(
    request: GenerateRequest,
    corpus: Corpus = Depends(get_corpus),
    settings: Settings = Depends(get_settings_dep),
) -> dict:
    ctx = _context(request, corpus, settings)
    character = generate_all(ctx)
    if settings.validate_output:
        validate_final_character(character, settings.schemas_path)
    return character


@app.post("/characters/{stage}")
def regenerate_stage(
    stage: str,
    request: GenerateRequest,
    corpus: Corpus = Depends(get_corpus),
    settings: Settings = Depends(get_settings_dep),
) -> StageResponse:
    if stage not in STAGES:
        raise HTTPException(status_code=404, detail="Stage not found")
    ctx = _context(request, corpus, settings)
    value = apply_stage(ctx, stage)
    return StageResponse(stage=stage, value=value, character=ctx.character)


@app.post("/darkdawn/characters")
def create_dark_dawn_character(
    request: DarkDawnRequest,
    corpus: DarkDawnCorpus = Depends(get_dark_dawn_corpus),
    settings: Settings = Depends(get_settings_dep),
) -> dict:
    rng = Randomizer(request.seed, max_attempts=settings.max_draw_attempts)
    character = generate_dark_dawn(corpus, rng, request.to_locks(), request.previous, request.name)
    if settings.validate_output:
        validate_dark_dawn_character(character, settings.schemas_path)
    return character
