"""
Shared flows for the test suite.
"""

import pytest

from machi import Entry, Fork


BEER_CONDITIONS = {
    "no": lambda ctx: False,
    "hasEnteredAge": lambda ctx: bool(ctx.get("age")),
    "hasEnteredName": lambda ctx: bool(ctx.get("name")),
    "hasLookedUpPostcode": lambda ctx: bool(ctx.get("address")) or ctx.get("bypassPostcodeLookup", False),
    "hasEnteredAddress": lambda ctx: bool(ctx.get("address")),
    "hasEnteredJobTitle": lambda ctx: bool(ctx.get("jobTitle")),
    "hasEnteredSalary": lambda ctx: bool(ctx.get("salary")),
    "isOfLegalDrinkingAge": lambda ctx: bool(ctx.get("age")) and ctx["age"] >= 18,
    "isTooYoung": lambda ctx: bool(ctx.get("age")) and ctx["age"] < 18,
    "isRich": lambda ctx: bool(ctx.get("salary")) and ctx["salary"] > 100000,
    "hasBypassedPostcodeLookup": lambda ctx: ctx.get("bypassPostcodeLookup", False),
}


def beer_states():
    return [
        Entry("How old are you?", ["hasEnteredAge"]),
        Fork(
            "Is old enough",
            ["isOfLegalDrinkingAge"],
            [
                Entry("What's your name?", ["hasEnteredName"]),
                Entry("What's your postcode?", ["hasLookedUpPostcode"]),
                Fork(
                    "Bypassed postcode lookup",
                    ["hasBypassedPostcodeLookup"],
                    [Entry("What's your address?", ["hasEnteredAddress"])],
                ),
                Entry("What's your job title?", ["hasEnteredJobTitle"]),
                Entry("What's your salary?", ["hasEnteredSalary"]),
                Fork(
                    "If you're rich?",
                    ["isRich"],
                    [Entry("Sorry, you're too rich for free beer", ["no"])],
                ),
                Entry("Yay! You can have free beer", ["no"]),
            ],
        ),
        Fork(
            "Is too young",
            ["isTooYoung"],
            [Entry("Sorry, you're too young for free beer", ["no"])],
        ),
    ]


def age_states():
    return [
        Entry("Age?", [lambda ctx: "age" in ctx]),
        Fork(
            "is of legal age?",
            [lambda ctx: ctx.get("age", 0) >= 18],
            [
                Entry("Name?", [lambda ctx: bool(ctx.get("name"))]),
                Entry("Postcode?", [lambda ctx: bool(ctx.get("postcode"))]),
            ],
        ),
        Fork(
            "is too young?",
            [lambda ctx: "age" in ctx and ctx["age"] < 18],
            [Entry("Too young", [])],
        ),
    ]


@pytest.fixture
def beer_flow():
    """The free beer flow and its conditions map."""
    return beer_states(), dict(BEER_CONDITIONS)


@pytest.fixture
def age_flow():
    """A small age-gated flow written with inline predicates only."""
    return age_states()
