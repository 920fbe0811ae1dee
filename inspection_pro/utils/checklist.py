"""Catalogue des points de controle / Inspection checklist catalog.

26 items repartis en 6 categories, dans l'ordre d'affichage.
26 items across 6 categories, in display order.
"""

from typing import NamedTuple


class ChecklistItem(NamedTuple):
    id: str
    category: str
    item: str


CATEGORIES = [
    "Exterior",
    "Interior",
    "Engine & Mechanical",
    "Safety Systems",
    "Electrical",
    "Documentation",
]

# (category, item)
_CATALOG = [
    ("Exterior", "Body Condition"),
    ("Exterior", "Paint Condition"),
    ("Exterior", "Windows & Windshield"),
    ("Exterior", "Lights (Headlights, Taillights)"),
    ("Exterior", "Mirrors"),
    ("Exterior", "Tires & Wheels"),

    ("Interior", "Seats & Upholstery"),
    ("Interior", "Dashboard & Controls"),
    ("Interior", "Steering Wheel"),
    ("Interior", "Pedals & Floor Mats"),
    ("Interior", "Interior Lights"),

    ("Engine & Mechanical", "Engine Condition"),
    ("Engine & Mechanical", "Fluid Levels"),
    ("Engine & Mechanical", "Belts & Hoses"),
    ("Engine & Mechanical", "Battery"),
    ("Engine & Mechanical", "Exhaust System"),

    ("Safety Systems", "Brakes"),
    ("Safety Systems", "Airbags"),
    ("Safety Systems", "Seatbelts"),
    ("Safety Systems", "Horn"),

    ("Electrical", "Electrical System"),
    ("Electrical", "Air Conditioning"),
    ("Electrical", "Radio & Electronics"),

    ("Documentation", "Registration"),
    ("Documentation", "Insurance"),
    ("Documentation", "Service Records"),
]

CHECKLIST: list[ChecklistItem] = [
    ChecklistItem(id=str(i), category=category, item=item)
    for i, (category, item) in enumerate(_CATALOG, 1)
]

_BY_NAME = {entry.item: entry for entry in CHECKLIST}


def get_checklist_item(name: str) -> ChecklistItem | None:
    """Item du catalogue par nom / Catalog item by name."""
    return _BY_NAME.get(name)


def items_for_category(category: str) -> list[ChecklistItem]:
    return [entry for entry in CHECKLIST if entry.category == category]
