"""The seasonal rebus puzzles.

Every puzzle is split into parts. ``keywords`` decide whether a part is
solved, ``near_misses`` are plausible wrong guesses that get a softer
answer, and ``hint`` describes what the part *is* without naming it.
The full answer never leaves the server.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from django.db import models

from core.text import normalize


class Category(models.TextChoices):
    FOOD = 'food', 'mat'
    DRINK = 'drink', 'drikke'
    ACTIVITY = 'activity', 'aktivitet'
    PLACE = 'place', 'sted'
    VIBE = 'vibe', 'stemning'
    TIME = 'time', 'tidspunkt'


@dataclass(frozen=True)
class Part:
    category: Category
    keywords: Tuple[str, ...]
    hint: str
    near_misses: Tuple[str, ...] = ()

    def __post_init__(self):
        if not self.keywords:
            raise ValueError('A rebus part needs at least one keyword')
        for word in self.keywords + self.near_misses:
            token = normalize(word)
            if not token or ' ' in token:
                raise ValueError(f'Rebus vocabulary must be single words, got {word!r}')
        overlap = set(self.keyword_tokens) & set(self.near_miss_tokens)
        if overlap:
            raise ValueError(f'Near misses overlap keywords: {sorted(overlap)}')

    @property
    def keyword_tokens(self):
        return tuple(normalize(k) for k in self.keywords)

    @property
    def near_miss_tokens(self):
        return tuple(normalize(w) for w in self.near_misses)


@dataclass(frozen=True)
class Puzzle:
    id: int
    answer: str
    description: str
    parts: Tuple[Part, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not self.parts:
            raise ValueError(f'Rebus {self.id} has no parts')


PUZZLES = (
    Puzzle(
        id=1,
        answer='Pizza, øl og konkurranse på Oslo bowling',
        description='En trekant med smeltet ost, et skummende glass, en ransel som går konkurs, '
                    'hovedstadens rådhus og en tung kule som ruller mot kjegler',
        parts=(
            Part(Category.FOOD, ('pizza',), 'noe man spiser, ofte delt i biter',
                 near_misses=('burger', 'taco', 'pai')),
            Part(Category.DRINK, ('øl',), 'noe man drikker, ofte i glass',
                 near_misses=('brus', 'cider', 'pils')),
            Part(Category.ACTIVITY, ('konkurranse',), 'noe der man måler seg mot andre eller spiller mot noen',
                 near_misses=('konkurs', 'ransel', 'kamp')),
            Part(Category.PLACE, ('oslo',), 'en kjent by og hovedstad',
                 near_misses=('bergen', 'trondheim')),
            Part(Category.PLACE, ('bowling',), 'et sted der kuler ruller og poeng telles',
                 near_misses=('dart', 'biljard', 'minigolf', 'kjegler')),
        ),
    ),
    Puzzle(
        id=2,
        answer='Helaften med vin og tartar på bislett',
        description='En melkekartong, et juletre om kvelden, et stettglass, en tyv som stikker av '
                    'med noe, en spent overarm og en fjær som svever',
        parts=(
            Part(Category.TIME, ('helaften',), 'noe som varer hele kvelden',
                 near_misses=('julaften', 'kveld', 'helmelk')),
            Part(Category.DRINK, ('vin',), 'noe som ofte serveres i glass til mat',
                 near_misses=('champagne', 'musserende')),
            Part(Category.FOOD, ('tartar',), 'en rett laget av noe rått, ofte delt i små biter',
                 near_misses=('biff', 'carpaccio', 'tyv')),
            Part(Category.PLACE, ('bislett',), 'et område i byen, kjent for idrett og trening',
                 near_misses=('biceps', 'majorstuen')),
        ),
    ),
    Puzzle(
        id=3,
        answer='Fransk eventyrlig michelin opplevelse på mon oncl',
        description='Et blått, hvitt og rødt flagg, en bok med slott og drager, en kjent førstedame, '
                    'en skjeggete friluftsmann og en bror av mor eller far',
        parts=(
            Part(Category.VIBE, ('fransk',), 'noe med utenlandsk preg, ofte assosiert med mat og kultur',
                 near_misses=('italiensk', 'frankrike')),
            Part(Category.VIBE, ('eventyrlig',), 'noe som føles spesielt, nesten som et eventyr',
                 near_misses=('eventyr', 'magisk')),
            Part(Category.VIBE, ('michelin',), 'noe som handler om svært høy kvalitet på mat',
                 near_misses=('michelle', 'obama', 'gourmet')),
            Part(Category.PLACE, ('mon',), 'første del av et navn, bygget ved å fjerne noe',
                 near_misses=('monsen', 'lars')),
            Part(Category.PLACE, ('oncl',), 'andre del av navnet, uttales som et familiemedlem',
                 near_misses=('onkel', 'uncle')),
        ),
    ),
    Puzzle(
        id=4,
        answer='Dagstur øst for Oslo med spa og velvære på the Well',
        description='En sliten morgen etter fest, en matpakke, et kompass som peker mot soloppgangen, '
                    'hovedstadens rådhus, en spade, et skilt fra en velforening og en værmelding',
        parts=(
            Part(Category.TIME, ('dagstur',), 'en kort tur som ikke varer over natten',
                 near_misses=('dagsfylla', 'tur', 'helgetur')),
            Part(Category.PLACE, ('øst',), 'en retning, vist med kompass eller pil',
                 near_misses=('vest', 'nord', 'sør', 'kompass')),
            Part(Category.PLACE, ('oslo',), 'byen man reiser fra',
                 near_misses=('bergen', 'lillestrøm')),
            Part(Category.ACTIVITY, ('spa',), 'noe som handler om ro, varme og avslapning',
                 near_misses=('spade', 'massasje', 'badstue')),
            Part(Category.VIBE, ('velvære',), 'noe som handler om å føle seg bra',
                 near_misses=('vær', 'værmelding', 'avslapning')),
            Part(Category.PLACE, ('well',), 'et sted med engelsk navn, knyttet til avslapning',
                 near_misses=('vel', 'brønn')),
        ),
    ),
    Puzzle(
        id=5,
        answer='En sliten søndag på den gule måke',
        description='En penn, nisser som gjemmer seg, en tegneserie om ukas siste dag '
                    'og en gul sjøfugl',
        parts=(
            Part(Category.TIME, ('søndag',), 'en dag i helgen',
                 near_misses=('lørdag', 'helg')),
            Part(Category.VIBE, ('sliten',), 'følelsen av å være trøtt eller ferdig med uka',
                 near_misses=('trøtt', 'nisser', 'skjul')),
            Part(Category.PLACE, ('måke',), 'et dyr man ofte ser ved sjøen, her brukt symbolsk',
                 near_misses=('fugl', 'sjøfugl', 'måse')),
        ),
    ),
)

_BY_ID = {p.id: p for p in PUZZLES}


def get_puzzle(puzzle_id) -> Optional[Puzzle]:
    try:
        return _BY_ID.get(int(puzzle_id))
    except (TypeError, ValueError):
        return None
