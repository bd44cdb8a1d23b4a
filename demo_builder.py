#!/usr/bin/env python3
"""
Demo: Shape → Definition → Scripted answers → Value → Documents

Shows the full workflow:
1. Derive a survey definition from the Adventurer shape
2. Pre-fill it with suggestions and assumptions
3. Collect answers with the scripted backend
4. Serialize the responses and render an HTML form
"""

import logging

from elicitor import SurveyBuilder, deconstruct, derive_schema
from elicitor.backends import HtmlOptions, ScriptedBackend, save_html_file
from elicitor.examples import Adventurer
from elicitor.serialization import definition_to_yaml, responses_to_yaml


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 80)
    print("ELICITOR DEMO: Shape → Definition → Answers → Value")
    print("=" * 80)

    # =========================================================================
    # STEP 1: Derive
    # =========================================================================
    print("\n1. DERIVING SCHEMA...")
    definition = derive_schema(Adventurer)
    for question in definition.walk():
        print(f"   {question.path!s:40} {question.kind.name:10} {question.prompt}")

    # =========================================================================
    # STEP 2: Builder
    # =========================================================================
    print("\n2. BUILDING...")
    builder = (
        SurveyBuilder(Adventurer)
        .suggest("name", "Bilbo")
        .assume("brave", True)
        .assume("journal", "journal.txt")
    )

    # =========================================================================
    # STEP 3: Collect
    # =========================================================================
    print("\n3. COLLECTING...")
    backend = ScriptedBackend(
        {
            "passphrase": "Mithril42",
            "backstory": "Went there and back again.",
            "height": 1.1,
            "role": 1,
            "role.alternatives.1.school": "Illusion",
            "role.alternatives.1.mana": 40,
            "stats.strength": 5,
            "stats.agility": 10,
            "stats.wits": 12,
            "inventory": [2, 3],
            "inventory.alternatives.2.flavour": "Elderberry",
            "lucky_numbers": [7, 13],
        }
    )
    adventurer = builder.run(backend)
    print(f"   ✓ {adventurer}")

    # =========================================================================
    # STEP 4: Documents
    # =========================================================================
    print("\n4. SERIALIZING...")
    print(responses_to_yaml(deconstruct(Adventurer, adventurer)))

    save_html_file(builder.definition(), "adventurer.html", HtmlOptions(title="Magic Forest"))
    with open("adventurer_definition.yaml", "w") as f:
        f.write(definition_to_yaml(builder.definition()))
    print("   ✓ Saved adventurer.html and adventurer_definition.yaml")

    print("\n" + "=" * 80)


if __name__ == "__main__":
    main()
