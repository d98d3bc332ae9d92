from __future__ import annotations

import random

FIRST_NAMES = [
    "Aaron", "Adam", "Alfie", "Ben", "Callum", "Charlie", "Connor", "Danny", "Declan", "Dominic",
    "Eddie", "Elliot", "Finn", "Frankie", "George", "Harry", "Harvey", "Jack", "Jacob", "Jamie",
    "Joe", "Jordan", "Josh", "Kieran", "Kyle", "Lewis", "Liam", "Luke", "Marcus", "Mason",
    "Max", "Morgan", "Nathan", "Ollie", "Owen", "Reece", "Rhys", "Ryan", "Sam", "Scott",
    "Sean", "Theo", "Toby", "Tom", "Tyler", "Will", "Zak", "Andre", "Bruno", "Diego",
    "Emil", "Hugo", "Jonas", "Kasper", "Luca", "Mateo", "Nico", "Pedro", "Rafael", "Sven",
]

LAST_NAMES = [
    "Adams", "Bailey", "Barnes", "Bell", "Brooks", "Butler", "Campbell", "Clarke", "Collins", "Cooper",
    "Davies", "Dixon", "Edwards", "Evans", "Fletcher", "Ford", "Gibson", "Grant", "Gray", "Hall",
    "Harris", "Hughes", "Hunt", "Jenkins", "Kelly", "Kennedy", "Knight", "Lloyd", "Marshall", "Mason",
    "Mills", "Moore", "Morgan", "Murphy", "Owen", "Palmer", "Parker", "Powell", "Price", "Reid",
    "Roberts", "Robinson", "Russell", "Shaw", "Simpson", "Stewart", "Thomson", "Walsh", "Ward", "Watts",
    "Webb", "Wells", "West", "Whelan", "Wood", "Wright", "Almeida", "Berg", "Costa", "Dahlberg",
]


class NameGenerator:
    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)
        self._pool = sorted({f"{first} {last}" for first in FIRST_NAMES for last in LAST_NAMES})
        self._rng.shuffle(self._pool)
        self._idx = 0

    def next_name(self) -> str:
        # Once the pool runs out, repeats carry a lap number.
        name = self._pool[self._idx % len(self._pool)]
        lap = self._idx // len(self._pool)
        self._idx += 1
        return name if lap == 0 else f"{name} {lap + 1}"
