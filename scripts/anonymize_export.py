"""Anonymize a JSON export of the vote ledger and settlement table.

Discovers every user (by email in the votes, by name in the settlements),
generates fake replacements using faker with a fixed seed, and writes an
anonymized copy suitable for use as a test fixture.

The export is a JSON object with "votes" (VOTES rows) and "settlements"
(LEADERBOARD rows); other keys are copied through unchanged.

Usage:
    python scripts/anonymize_export.py export.json
    python scripts/anonymize_export.py export.json -o output.json
"""

import argparse
import json
from pathlib import Path

from faker import Faker

FIXTURES_DIR = Path(__file__).parent.parent / "tests" / "fixtures"
DEFAULT_OUTPUT = FIXTURES_DIR / "ledger.json"

SEED = 20250322

# Names the app stores when the identity provider gave none
PLACEHOLDER_NAMES = {"", "Empty"}


def discover_users(export: dict) -> tuple[dict[str, str], set[str]]:
    """Find every user in the export.

    Returns (email -> display name as last seen in the votes, set of names
    that only appear in the settlements).
    """
    by_email: dict[str, str] = {}
    for row in export.get("votes", []):
        name = row.get("user_name") or ""
        by_email[row["user_email"]] = "" if name in PLACEHOLDER_NAMES else name

    known_names = {name for name in by_email.values() if name}
    settlement_only = {
        row["user_name"] for row in export.get("settlements", [])
        if row["user_name"] not in known_names
    }
    return by_email, settlement_only


def generate_fake_users(
    by_email: dict[str, str], settlement_only: set[str], seed: int
) -> tuple[dict[str, str], dict[str, str]]:
    """Generate replacement emails and names.

    A person keeps the same fake name in the votes and the settlements,
    matched through their display name.

    Returns (email mapping, name mapping).
    """
    fake = Faker(["en_IN", "en_GB", "en_US"])
    Faker.seed(seed)

    email_mapping: dict[str, str] = {}
    name_mapping: dict[str, str] = {}
    used: set[str] = set()

    def fresh_name() -> str:
        name = fake.name()
        while name.lower() in used:
            name = fake.name()
        used.add(name.lower())
        return name

    for email in sorted(by_email):
        real_name = by_email[email]
        if real_name and real_name in name_mapping:
            fake_name = name_mapping[real_name]
        else:
            fake_name = fresh_name()
            if real_name:
                name_mapping[real_name] = fake_name
        local = fake_name.lower().replace(" ", ".").replace("'", "")
        email_mapping[email] = f"{local}@example.com"

    for real_name in sorted(settlement_only):
        name_mapping[real_name] = fresh_name()

    return email_mapping, name_mapping


def apply_replacements(
    export: dict, email_mapping: dict[str, str], name_mapping: dict[str, str]
) -> dict:
    """Return a copy of the export with users replaced."""
    result = dict(export)
    result["votes"] = [
        {
            **row,
            "user_email": email_mapping.get(row["user_email"], row["user_email"]),
            "user_name": name_mapping.get(row.get("user_name") or "", row.get("user_name")),
        }
        for row in export.get("votes", [])
    ]
    result["settlements"] = [
        {**row, "user_name": name_mapping.get(row["user_name"], row["user_name"])}
        for row in export.get("settlements", [])
    ]
    return result


def main():
    parser = argparse.ArgumentParser(
        description="Anonymize a vote ledger / settlement export")
    parser.add_argument("input", help="Path to the input JSON export")
    parser.add_argument("-o", "--output", default=str(DEFAULT_OUTPUT),
                        help=f"Output path (default: {DEFAULT_OUTPUT})")
    args = parser.parse_args()

    export = json.loads(Path(args.input).read_text(encoding="utf-8"))

    by_email, settlement_only = discover_users(export)
    print(f"Found {len(by_email)} voters and {len(settlement_only)} "
          f"settlement-only users")

    email_mapping, name_mapping = generate_fake_users(by_email, settlement_only, SEED)

    for original, fake in sorted(name_mapping.items()):
        print(f"  {original} -> {fake}")

    result = apply_replacements(export, email_mapping, name_mapping)

    # Verify no original identities remain
    text = json.dumps(result)
    remaining = [e for e in by_email if e in text]
    remaining += [n for n in name_mapping if f'"{n}"' in text]
    if remaining:
        print(f"WARNING: {len(remaining)} identities still found: {remaining}")
    else:
        print("All users successfully replaced.")

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(result, indent=2) + "\n", encoding="utf-8")
    print(f"Written to {output_path}")


if __name__ == "__main__":
    main()
