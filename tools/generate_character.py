#!/usr/bin/env python3
import argparse
import json
import logging
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from character_creation.context import RANDOM, EthnicityMode, GenerationContext, GenerationOptions, Locks, RaceMode
from character_creation.corpus import load_corpus, load_dark_dawn_corpus
from character_creation.darkdawn import DarkDawnLocks, generate_dark_dawn
from character_creation.errors import GenerationError
from character_creation.generate import generate_all
from character_creation.randomizer import Randomizer
from service.config import get_settings

LOCK_FIELDS = ["name", "traits", "occupation", "gender", "race", "class", "background", "life"]


def parse_args(argv=None):
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Random character generator")
    parser.add_argument("--data-dir", type=Path, default=None, help="Directory holding the corpus JSON documents")
    parser.add_argument("--books", nargs="*", default=None, help="Book codes to enable (Real and PHB are always on)")
    parser.add_argument("--race", default=RANDOM)
    parser.add_argument("--class", dest="char_class", default=RANDOM)
    parser.add_argument("--background", default=RANDOM)
    parser.add_argument("--gender", default=RANDOM)
    parser.add_argument("--name", default="", help="Manual name; generated when omitted")
    parser.add_argument("--race-mode", choices=[mode.value for mode in RaceMode], default=settings.race_mode.value)
    parser.add_argument(
        "--ethnicity", choices=[mode.value for mode in EthnicityMode], default=settings.ethnicity_mode.value
    )
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--previous", type=Path, default=None, help="JSON file with the prior character")
    parser.add_argument("--lock", action="append", default=[], help="Field to keep from --previous (repeatable)")
    parser.add_argument("--lock-all", action="store_true")
    parser.add_argument("--darkdawn", action="store_true", help="Generate a Dark Dawn character instead")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def load_previous(path):
    if path is None:
        return {}
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def main(argv=None):
    args = parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    rng = Randomizer(args.seed, max_attempts=settings.max_draw_attempts)
    previous = load_previous(args.previous)

    try:
        if args.darkdawn:
            data_dir = args.data_dir or settings.darkdawn_path
            try:
                locks = DarkDawnLocks.lock_all() if args.lock_all else DarkDawnLocks.from_mapping({f: True for f in args.lock})
            except ValueError as exc:
                raise SystemExit(str(exc)) from exc
            character = generate_dark_dawn(load_dark_dawn_corpus(data_dir), rng, locks, previous, args.name)
        else:
            unknown = [field for field in args.lock if field not in LOCK_FIELDS]
            if unknown:
                raise SystemExit(f"Unknown lock field(s): {', '.join(unknown)}")
            locks = Locks.lock_all() if args.lock_all else Locks.from_mapping({f: True for f in args.lock})
            options = GenerationOptions(
                books=args.books if args.books is not None else settings.default_books,
                ethnicity_mode=EthnicityMode(args.ethnicity),
                race_mode=RaceMode(args.race_mode),
                race=args.race,
                gender=args.gender,
                char_class=args.char_class,
                background=args.background,
                name=args.name,
                locks=locks,
            )
            corpus = load_corpus(args.data_dir or settings.data_path)
            character = generate_all(GenerationContext.build(corpus, options, rng, previous))
    except GenerationError as exc:
        print(json.dumps({"code": exc.code, "message": exc.message, "details": exc.details}), file=sys.stderr)
        return 1

    print(json.dumps(character, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
