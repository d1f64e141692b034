"""Fixed roll tables.

Each table is a list of ``(upper_bound, result)`` rows checked in order; a
roll strictly below ``upper_bound`` selects the row, and the final row (bound
``None``) catches everything else.
"""

from typing import Any, List, Optional, Sequence, Tuple

Table = Sequence[Tuple[Optional[int], Any]]


def lookup(table: Table, roll: float) -> Any:
    for upper_bound, result in table:
        if upper_bound is None or roll < upper_bound:
            return result
    raise ValueError("Table has no catch-all row")


# Uniform over [0, 99), or [0, 100) when adventurers are allowed.
OCCUPATIONS: Table = [
    (5, "Academic"),
    (10, "Aristocrat"),
    (25, "Artisan or guild member"),
    (30, "Criminal"),
    (35, "Entertainer"),
    (37, "Exile, hermit, or refugee"),
    (42, "Explorer or wanderer"),
    (54, "Farmer or herder"),
    (59, "Hunter or trapper"),
    (74, "Laborer"),
    (79, "Merchant"),
    (84, "Politician or bureaucrat"),
    (89, "Priest"),
    (94, "Sailor"),
    (99, "Soldier"),
    (None, None),
]

# 3d6; list results are settled with a coin flip.
ALIGNMENTS: Table = [
    (4, ["Chaotic Evil", "Chaotic Neutral"]),
    (6, "Lawful Evil"),
    (9, "Neutral Evil"),
    (13, "Neutral"),
    (16, "Neutral Good"),
    (17, "Lawful Good"),
    (18, "Lawful Neutral"),
    (None, ["Chaotic Good", "Chaotic Neutral"]),
]

# Uniform over [0, 115); book-gated rows carry the book they need.
CLASS_WEIGHTS: Table = [
    (7, ("Barbarian", None)),
    (14, ("Bard", None)),
    (29, ("Cleric", None)),
    (36, ("Druid", None)),
    (52, ("Fighter", None)),
    (58, ("Monk", None)),
    (64, ("Paladin", None)),
    (70, ("Ranger", None)),
    (84, ("Rogue", None)),
    (89, ("Sorcerer", None)),
    (94, ("Warlock", None)),
    (100, ("Wizard", None)),
    (105, ("Artificer", "EBR")),
    (110, ("Blood Hunter", "Other")),
    (None, ("Mystic", "UA")),
]
CLASS_WEIGHT_TOTAL = 115

# Uniform over [0, 100).
RAISED_BY: Table = [
    (1, "Nobody"),
    (2, "Institution, such as an asylum"),
    (3, "Temple"),
    (5, "Orphanage"),
    (7, "Guardian"),
    (15, "Paternal or maternal aunt, uncle, or both : or extended family such as a tribe or clan"),
    (25, "Paternal or maternal grandparent(s)"),
    (35, "Adoptive family (same or different race)"),
    (55, "Single father or stepfather"),
    (75, "Single mother or stepmother"),
    (None, "Mother and father"),
]
BOTH_PARENTS = "Mother and father"

ABSENT_PARENT_REASONS: List[str] = [
    "Your parent(s) died",
    "Your parent(s) was/were imprisoned, enslaved, or otherwise taken away",
    "Your parent(s) abandoned you",
    "Your parent(s) disappeared to an unknown fate",
]

# 3d6 -> (lifestyle, childhood home modifier)
LIFESTYLES: Table = [
    (4, ("Wretched", -40)),
    (6, ("Squalid", -20)),
    (9, ("Poor", -10)),
    (13, ("Modest", 0)),
    (16, ("Comfortable", 10)),
    (18, ("Wealthy", 20)),
    (None, ("Aristocratic", 40)),
]

# d100 (0-99) + lifestyle modifier
CHILDHOOD_HOMES: Table = [
    (0, "On the streets"),
    (20, "Rundown shack"),
    (30, "No permanent residence, you moved around a lot"),
    (40, "Encampment of village in the wilderness"),
    (50, "Apartment in a rundown neighborhood"),
    (70, "Small house"),
    (90, "Large house"),
    (110, "Mansion"),
    (None, "Palace or Castle"),
]

# 3d6 + (0-4) - 1
CHILDHOOD_MEMORIES: Table = [
    (4, "I am still haunted by my childhood, when I was treated badly by my peers"),
    (6, "I spent most of my childhood alone, with no close friends"),
    (9, "Others saw me as being different or strange, and so I had few companions"),
    (13, "I had a few close friends and lived an ordinary childhood."),
    (16, "I had several friends, and my childhood was generally a happy one."),
    (18, "I always found it easy to make friends, and I loved being around people."),
    (None, "Everyone knew who I was, and I had friends everywhere I went."),
]

# 3d6
STATUSES: Table = [
    (4, "Dead (roll on the Cause of Death table)"),
    (6, "Missing or unknown"),
    (9, "Alive, but doing poorly due to injury, financial trouble, or relationship difficulties"),
    (13, "Alive and well"),
    (16, "Alive and quite successful"),
    (18, "Alive and infamous"),
    (None, "Alive and famous"),
]

# 3d4
RELATIONSHIPS: Table = [
    (5, "Hostile"),
    (11, "Friendly"),
    (None, "Indifferent"),
]

# 2d6
BIRTH_ORDERS: Table = [
    (3, "Twin, triplet, or quadruplet"),
    (8, "Older"),
    (None, "Younger"),
]
CONSTRUCTION_ORDERS: Table = [
    (3, "Simultaneous"),
    (8, "Older"),
    (None, "Younger"),
]

LIFE_EVENT_BONUS_CATEGORY = "Weird Stuff"
JOB_EVENT = "You spent time working in a job related to your background. Start the game with an extra 2d6 gp."
