"""
Example shapes used by the demos and tests.

    Person       flat struct with a bounded integer
    Payment      enum with a unit variant and a data-carrying variant
    Profile      struct nesting an Address
    Phone        multi-select over a plain enum of features
    Cart         multi-select over an enum whose options carry data
    Adventurer   a larger form: masked, multiline and float fields,
                 optional fields, an enum with struct and positional
                 variants, a multi-select with payloads, field-level and
                 composite validation
"""
import enum
import pathlib
from dataclasses import dataclass
from typing import List, Optional

from elicitor.shapes import OneOf, ask, survey


# =============================================================================
# SMALL SHAPES
# =============================================================================


@survey(prelude="Let's get to know you.", epilogue="Thanks!")
@dataclass
class Person:
    name: str = ask("What is your name?")
    age: int = ask("How old are you?", min=18, max=120)


class Payment(OneOf):
    pass


class Cash(Payment, ask="Cash"):
    pass


@dataclass
class Card(Payment, ask="Card"):
    number: str = ask("Card number:")


@dataclass
class Checkout:
    payment: Payment = ask("How would you like to pay?")


@dataclass
class Address:
    street: str = ask("Street:")
    city: str = ask("City:")


@dataclass
class Profile:
    name: str = ask("Name:")
    address: Address = ask("Address")


class Feature(enum.Enum):
    GPS = "GPS"
    BLUETOOTH = "Bluetooth"
    CAMERA = "Camera"


@dataclass
class Phone:
    features: List[Feature] = ask("Which features do you need?", multiselect=True)


# =============================================================================
# ADVENTURER
# =============================================================================

STARTING_BUDGET = 200
ITEM_COSTS = {"Sword": 80, "Shield": 50, "Potion": 20, "Scroll": 10, "Wand": 100}


def validate_name(value, responses, path):
    name = value.value.strip()
    if len(name) < 3:
        return "Name must be at least 3 characters"
    if not all(c.isalpha() or c.isspace() for c in name):
        return "Name can only contain letters and spaces"
    return None


def validate_passphrase(value, responses, path):
    secret = value.value
    if len(secret) < 8:
        return "Passphrase must be at least 8 characters"
    if not any(c.isupper() for c in secret) or not any(c.isdigit() for c in secret):
        return "Passphrase needs an uppercase letter and a digit"
    return None


def validate_budget(value, responses, path):
    cost = sum(ITEM_COSTS[_ITEMS[index]] for index in value.ordered())
    if cost > STARTING_BUDGET:
        return f"Over budget: {cost} gold of {STARTING_BUDGET}"
    return None


def positive(value, responses, path):
    if value.value < 0:
        return "Must not be negative"
    return None


class Role(OneOf):
    pass


class Warrior(Role, ask="Warrior"):
    pass


@dataclass
class Mage(Role, ask="Mage"):
    school: str = ask("School of magic:")
    mana: int = ask("Starting mana:", min=10, max=100)


@dataclass
class Ranger(Role, ask="Ranger"):
    field_0: str = ask("Companion animal:")
    field_1: int = ask("Arrows:", min=0, max=99)


class Item(OneOf):
    pass


class Sword(Item, ask="Sword (80 gold)"):
    pass


class Shield(Item, ask="Shield (50 gold)"):
    pass


@dataclass
class Potion(Item, ask="Potion (20 gold)"):
    flavour: str = ask("Flavour:")


class Scroll(Item, ask="Scroll (10 gold)"):
    pass


@dataclass
class Wand(Item, ask="Wand (100 gold)"):
    wood: str = ask("Wood:")
    length: float = ask("Length in inches:", min=8.0, max=15.0)


_ITEMS = ["Sword", "Shield", "Potion", "Scroll", "Wand"]


@dataclass
class Cart:
    items: List[Item] = ask("What would you like?", multiselect=True)


def check_stats(responses):
    total = sum(responses.get_int(name) for name in ("strength", "agility", "wits"))
    if total > 30:
        return {"wits": f"Stats add up to {total}; the limit is 30"}
    return {}


@survey(validate_fields=positive, validate=check_stats)
@dataclass
class Stats:
    strength: int = ask("Strength:", max=20)
    agility: int = ask("Agility:", max=20)
    wits: int = ask("Wits:", max=20)


@survey(
    prelude="Welcome to the Magic Forest!",
    epilogue="Your adventure begins.",
)
@dataclass
class Adventurer:
    name: str = ask("What is your name, traveller?", validate=validate_name)
    passphrase: str = ask("Speak the secret passphrase:", mask=True, validate=validate_passphrase)
    backstory: str = ask("Tell us your story:", multiline=True)
    height: float = ask("Height in metres:", min=0.5, max=3.0)
    brave: bool = ask("Are you brave?")
    role: Role = ask("Choose your path:")
    stats: Stats = ask("Distribute your stats")
    inventory: List[Item] = ask("Buy equipment:", multiselect=True, validate=validate_budget)
    lucky_numbers: List[int] = ask("Lucky numbers:", min=1, max=99)
    journal: pathlib.Path = ask("Where should your journal be saved?")
    title: Optional[str] = ask("An honorific, if any:")


def example_adventurer() -> Adventurer:
    """A complete, valid Adventurer."""
    return Adventurer(
        name="Bilbo",
        passphrase="Mithril42",
        backstory="There and back again.",
        height=1.1,
        brave=True,
        role=Mage(school="Illusion", mana=40),
        stats=Stats(strength=5, agility=10, wits=12),
        inventory=[Potion(flavour="Elderberry"), Scroll()],
        lucky_numbers=[7, 13],
        journal=pathlib.Path("journal.txt"),
        title=None,
    )


__all__ = [
    "Person",
    "Payment",
    "Cash",
    "Card",
    "Checkout",
    "Address",
    "Profile",
    "Feature",
    "Phone",
    "Role",
    "Warrior",
    "Mage",
    "Ranger",
    "Item",
    "Sword",
    "Shield",
    "Potion",
    "Scroll",
    "Wand",
    "Cart",
    "Stats",
    "Adventurer",
    "example_adventurer",
]
