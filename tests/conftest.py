import copy
import json
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from character_creation.context import GenerationContext, GenerationOptions
from character_creation.corpus import Corpus, DarkDawnCorpus
from character_creation.randomizer import Randomizer

REPO_ROOT = Path(__file__).resolve().parents[1]


def _gendered(male: str, female: str) -> dict:
    return {"Male": male.split(), "Female": female.split()}


GENDERED = _gendered("Aldo Bram Corwin Darvin Evendur Gorstag", "Arveene Esvele Jhessail Kerri Lureene Miri")

ADVENTURES = [f"Adventure outcome {i}" for i in range(11)]

DOCUMENTS = {
    "books": {"availableBooks": ["EBR", "EGtW", "GGR", "Other", "SCAG", "UA", "VGtM", "XGtE"]},
    "races": {
        "Human": {
            "_special": "book-PHB",
            "Subraces and Variants": {
                "Ethnicity": {
                    "_special": "humanethnicity",
                    "PHB": ["Chondathan", "Tethyrian"],
                    "SCAG": ["Bedine", "Tuigan"],
                    "Real": ["English", "Japanese"],
                },
            },
            "Physical Characteristics": {
                "_special": "characteristics",
                "minage": 18,
                "maxage": 60,
                "baseheight": 56,
                "heightmod": "2d10",
                "baseweight": 110,
                "weightmod": "2d4",
            },
        },
        "Dwarf": {
            "_special": "book-PHB subracesort",
            "Subraces and Variants": {
                "Subrace": {"PHB": ["Hill Dwarf", "Mountain Dwarf"], "SCAG": ["Duergar"]},
            },
            "Physical Characteristics": {
                "Hill Dwarf": {
                    "_special": "characteristics",
                    "minage": 50,
                    "maxage": 350,
                    "baseheight": 44,
                    "heightmod": "2d4",
                    "baseweight": 115,
                    "weightmod": "2d6",
                },
                "Mountain Dwarf": {
                    "_special": "characteristics",
                    "minage": 50,
                    "maxage": 350,
                    "baseheight": 48,
                    "heightmod": "2d4",
                    "baseweight": 130,
                    "weightmod": "2d6",
                },
                "Duergar": {
                    "_special": "characteristics",
                    "minage": 50,
                    "maxage": 350,
                    "baseheight": 44,
                    "heightmod": "2d4",
                    "baseweight": 115,
                    "weightmod": "2d6",
                    "_other": {"Skin": "Gray"},
                },
            },
        },
        "Elf": {
            "_special": "book-PHB subracesort",
            "Subraces and Variants": {"Subrace": ["High Elf", "Wood Elf"]},
            "Physical Characteristics": {
                "High Elf": {
                    "_special": "characteristics",
                    "minage": 100,
                    "maxage": 700,
                    "baseheight": 54,
                    "heightmod": "2d10",
                    "baseweight": 90,
                    "weightmod": "1d4",
                },
                "Wood Elf": {
                    "_special": "characteristics",
                    "minage": 100,
                    "maxage": 700,
                    "baseheight": 54,
                    "heightmod": "2d10",
                    "baseweight": 100,
                    "weightmod": "1d4",
                },
            },
        },
        "Half-Elf": {
            "_special": "book-PHB",
            "Ethnicity": {"_special": "halfethnicity"},
            "Dragonmark": {"_special": "dragonmarkvariant", "_array": ["Mark of Detection", "Mark of Storm"]},
        },
        "Tiefling": {
            "_special": "book-PHB",
            "Appearance": {
                "_special": "tieflingappearance",
                "_array": ["Horns", "Tail", "Red skin", "Goat legs", "Smell of brimstone", "Cold eyes"],
            },
            "Variant": {"_special": "tieflingvarianttype", "_array": ["Feral", "Winged"]},
        },
        "Dragonborn": {
            "_special": "book-PHB",
            "Ancestry": {"_special": "booksort", "PHB": ["Red", "Blue"], "EGtW": ["Amethyst"]},
            "Variant": {"_special": "dragonbornvarianttype", "_array": ["Chromatic", "Gem"]},
            "Demeanor": {"_special": "gendersort", "Male": "Stoic", "Female": "Proud"},
        },
        "Warforged": {"_special": "book-EBR", "Body": ["Stone", "Steel"]},
        "Orc": {"_special": "book-VGtM", "Origin": {"_special": "monstrousorigin"}},
    },
    "classes": {
        "Fighter": {"_special": "book-PHB", "Fighting Style": ["Archery", "Defense"]},
        "Wizard": {"_special": "book-PHB", "Tradition": ["Evocation", "Divination"]},
        "Artificer": {"_special": "book-EBR", "Specialist": ["Alchemist", "Artillerist"]},
        "Homebrew": {"Notes": "Untagged entries are only chosen explicitly"},
    },
    "backgrounds": {
        "Acolyte": {
            "_special": "book-PHB",
            "Trait": ["Serene", "Devout"],
            "Ideal": ["Faith"],
            "Bond": ["My temple"],
            "Flaw": ["Judgmental"],
        },
        "Noble": {
            "_special": "book-PHB",
            "Trait": ["Refined"],
            "Ideal": ["Respect"],
            "Bond": ["My family"],
            "Flaw": ["Arrogant"],
        },
        "Knight": {
            "_special": "book-PHB",
            "Feature": "Retainers",
            "Personality": {"_special": "backgroundtraits-Noble"},
        },
        "Azorius Functionary": {
            "_special": "book-GGR",
            "Contacts": {
                "_special": "ravnicacontacts",
                "_name": "Azorius",
                "_guild": ["Arrester", "Judge"],
                "_nonguild": ["Boros soldier", "_reroll"],
            },
        },
        "Dimir Operative": {
            "_special": "book-GGR",
            "Contacts": {
                "_special": "dimircontacts",
                "_dimircontact": ["Handler", "Mind mage"],
                "_guilds": [{"name": "Azorius", "background": "Azorius Functionary"}],
            },
        },
    },
    "names": {
        "Human": {
            "Chondathan": {**GENDERED, "Surname": ["Amblecrown", "Dundragon", "Evenwood"]},
            "Bedine": {**GENDERED, "Tribe": ["Alaii", "Bordjia", "Clelarra"]},
            "Tuigan": dict(GENDERED),
        },
        "Human (Real)": {
            "English": dict(GENDERED),
            "Japanese": _gendered("Hiro Kenji Sora Taro Yuto Ren", "Yui Aiko Emi Hana Mei Rin"),
        },
        "Dwarf": {
            **_gendered("Adrik Baern Barendd Brottor Dain Eberk", "Amber Artin Audhild Bardryn Dagnal Diesa"),
            "Clan": ["Battlehammer", "Brawnanvil", "Dankil"],
            "Clan (Duergar)": ["Grimbeard", "Ashforge"],
        },
        "Elf": {
            **_gendered("Adran Aelar Aramil Arannis Aust Beiro", "Adrie Althaea Anastrianna Andraste Antinua Bethrynna"),
            "Child": ["Ara", "Bryn", "Del", "Eryn", "Faen", "Innil"],
            "Family": ["Amakiir", "Galanodel", "Holimion"],
        },
        "Drow": {"Male": ["Belgos"], "Female": ["Chessintra"], "Family": ["Do'Urden"]},
        "Shadar-kai": {"Male": ["Dular"], "Female": ["Ilvan"]},
        "Orc": _gendered("Dench Feng Gell Henk Holg Imsh", "Baggi Emen Engong Kansif Myev Neega"),
        "Infernal": _gendered("Akmenos Amnon Barakas Damakos Ekemon Iados", "Akta Anakis Bryseis Criella Damaia Ea"),
        "Virtue": ["Hope", "Glory", "Art", "Carrion", "Chant", "Creed"],
        "Dragonborn": {
            **_gendered("Arjhan Balasar Bharash Donaar Ghesh Heskan", "Akra Biri Daar Farideh Harann Havilar"),
            "Clan": ["Clethtinthiallor", "Daardendrian", "Delmirev"],
        },
        "Warforged": ["Anchor", "Bastion", "Cart", "Dent", "Echo", "Finder"],
        "Gnome": {
            "Male": ["Alston", "Boddynock", "Dimble", "Eldon", "Fonkin", "Gimble", "Glim", "Orryn"],
            "Female": ["Bimpnottin", "Breena", "Caramip", "Carlin", "Donella", "Duvamil", "Ella", "Lilli"],
            "Nickname": ["Badger", "Cloak"],
            "Clan": ["Beren", "Daergel"],
        },
        "Deep Gnome": {"Male": ["Brickers"], "Female": ["Beliss"], "Clan": ["Deepstone"]},
        "Tabaxi": {"Name": ["Cloud on the Mountaintop", "Five Timber"], "Clan": ["Bright Cliffs", "Mountain Tree"]},
        "Goliath": {"Birth": ["Aukan"], "Nickname": ["Bearkiller"], "Clan": ["Anakalathai"]},
        "Satyr": {"Male": ["Alen"], "Female": ["Ariadne"], "Nicknames": ["Axe"]},
        "Githyanki": {"Male": ["Elric"], "Female": ["Aaryl"]},
        "Githzerai": {"Male": ["Dak"], "Female": ["Adaka"]},
        "Vedalken": {"Male": ["Aglar"], "Female": ["Azi"]},
        "Kalashtar/Quori": ["Ashana"],
    },
    "life": {
        "origins": {
            "Birthplace": ["Home", "Temple"],
            "Parents": {
                "Half-Elf": [
                    "One parent was an elf and the other was a human.",
                    "One parent was an elf and the other was a half-elf.",
                ],
                "Tiefling": ["Both parents were humans, their infernal heritage dormant until you came along."],
            },
        },
        "eventTables": {
            "Life Events": [
                "Tragedy", "Tragedy", "Boon", "Boon", "Marriage",
                "Marriage", "Friend", "Friend", "Enemy", "Enemy",
                "Job", "Job", "Someone Important", "Someone Important", "Adventure",
                "Adventure", "Supernatural", "War", "Crime", "Arcane Matters",
            ],
            "Tragedy": ["A friend died"],
            "Boon": ["You found some money"],
            "Adventure": ADVENTURES,
            "Supernatural": ["You saw a ghost"],
            "War": ["You fought in a battle"],
            "Crime": ["Murder", "Theft"],
            "Punishment": ["You were acquitted", "You escaped"],
            "Arcane Matters": ["You saw a spell cast"],
            "Weird Stuff": ["You were turned into a toad"],
        },
        "trinkets": ["A mummified goblin hand", "A crystal that faintly glows"],
    },
    "npcs": {
        "appearances": ["Tattoos", "Scar"],
        "highAbilities": ["Strength", "Dexterity", "Constitution", "Intelligence", "Wisdom", "Charisma"],
        "lowAbilities": ["Feeble", "Clumsy", "Frail", "Dim-witted", "Oblivious", "Dull"],
        "talents": ["Juggles"],
        "mannerisms": ["Whistles"],
        "interactionTraits": ["Honest"],
        "ideals": ["Charity", "Power"],
        "bonds": [f"Bond {i}" for i in range(9)],
        "flawsAndSecrets": ["Greedy"],
    },
    "other": {
        "genders": ["Male", "Female", "Nonbinary or Unknown"],
        "raceWeights": {"Human": 10, "Dwarf": 4, "Elf": 4, "Half-Elf": 2, "Tiefling": 1, "Dragonborn": 1},
        "monstrousOrigins": ["Raised by cultists", "Runaway"],
    },
}

DARK_DAWN_DOCUMENTS = {
    "races": {"Ashborn": {"name": "Ashborn"}, "Duskling": {"name": "Duskling"}},
    "factions": {
        "Lanterns": {"name": "Lanterns", "abilities": ["Beacon", "Ward"]},
        "Hollow": {"name": "Hollow", "abilities": []},
    },
    "deities": {"The Ember": {"name": "The Ember", "domain": "Fire"}},
    "classes": {"Warden": {"name": "Warden"}, "Seer": {"name": "Seer"}},
    "special-abilities": {"Second Sight": {"name": "Second Sight"}},
}


def _write_json(path: Path, payload) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


@pytest.fixture()
def documents():
    return copy.deepcopy(DOCUMENTS)


@pytest.fixture()
def corpus(documents):
    return Corpus.from_documents(documents)


@pytest.fixture()
def dark_dawn_corpus():
    documents = copy.deepcopy(DARK_DAWN_DOCUMENTS)
    documents["special_abilities"] = documents.pop("special-abilities")
    return DarkDawnCorpus.from_documents(documents)


@pytest.fixture()
def make_ctx(corpus):
    """Build a context over the test corpus; ``character`` seeds the record in progress."""

    def build(rng=None, books=("SCAG",), character=None, previous=None, **options):
        ctx = GenerationContext.build(
            corpus,
            GenerationOptions(books=books, **options),
            rng or Randomizer(7),
            previous,
        )
        if character is not None:
            ctx.character = character
        return ctx

    return build


@pytest.fixture()
def corpus_dir(tmp_path):
    data_dir = tmp_path / "data"
    for name, payload in DOCUMENTS.items():
        _write_json(data_dir / f"{name}.json", payload)
    for name, payload in DARK_DAWN_DOCUMENTS.items():
        _write_json(data_dir / "darkdawn" / f"{name}.json", payload)
    return data_dir


@pytest.fixture()
def client(corpus_dir, monkeypatch):
    from fastapi.testclient import TestClient

    monkeypatch.setenv("CHARGEN_REPO_ROOT", str(corpus_dir.parent))
    monkeypatch.setenv("CHARGEN_DATA_DIR", "data")
    monkeypatch.setenv("CHARGEN_DARKDAWN_DIR", "data/darkdawn")
    monkeypatch.setenv("CHARGEN_SCHEMAS_DIR", str(REPO_ROOT / "schemas"))
    monkeypatch.setenv("CHARGEN_DEFAULT_BOOKS", '["SCAG"]')

    from service.config import get_settings

    get_settings.cache_clear()
    from service.app import app, clear_corpus_cache

    clear_corpus_cache()
    with TestClient(app) as test_client:
        yield test_client
    clear_corpus_cache()
    get_settings.cache_clear()
