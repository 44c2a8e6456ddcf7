"""Pairwise crew bonds."""

from __future__ import annotations

from pathlib import Path
import sys

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from shipbreakers.crew.relationships import (
    RelationshipLedger,
    RelationshipLevel,
    relationship_key,
)


def test_bonds_are_unordered() -> None:
    ledger = RelationshipLedger()
    ledger.change("zed", "amy", 1.5, "Fixed a leak together")
    assert relationship_key("zed", "amy") == ("amy", "zed")
    assert ledger.level("amy", "zed") == pytest.approx(6.5)
    assert ledger.get("zed", "amy") is ledger.get("amy", "zed")


def test_unknown_pairs_report_starting_level() -> None:
    ledger = RelationshipLedger(starting_level=4.0)
    assert ledger.level("amy", "bob") == pytest.approx(4.0)
    assert ledger.get("amy", "bob") is None


def test_levels_stay_clamped_under_random_changes() -> None:
    rng = np.random.default_rng(7)
    crew = ["amy", "bob", "cyd", "dee"]
    ledger = RelationshipLedger()
    for _ in range(10_000):
        first, second = rng.choice(crew, size=2, replace=False)
        ledger.change(str(first), str(second), float(rng.uniform(-4, 4)), "Argument")
    assert len(ledger) == 6
    for relationship in ledger:
        assert 0.0 <= relationship.level <= 10.0


def test_history_keeps_newest_reasons() -> None:
    ledger = RelationshipLedger(history_limit=3)
    for index in range(5):
        ledger.change("amy", "bob", 0.1, f"shift {index}")
    relationship = ledger.get("amy", "bob")
    assert relationship is not None
    assert relationship.history == ["shift 4", "shift 3", "shift 2"]


def test_self_relationships_are_rejected() -> None:
    with pytest.raises(ValueError):
        RelationshipLedger().change("amy", "amy", 1, "Mirror")


def test_change_reports_clamped_delta() -> None:
    ledger = RelationshipLedger()
    change = ledger.change("amy", "bob", 8, "Saved a life")
    assert change.delta == pytest.approx(5.0)
    assert ledger.level("amy", "bob") == 10.0


def test_work_together_touches_every_pair() -> None:
    ledger = RelationshipLedger()
    changes = ledger.work_together(["amy", "bob", "cyd"], 0.3)
    assert len(changes) == 3
    assert ledger.level("bob", "cyd") == pytest.approx(5.3)
    assert ledger.get("amy", "cyd").history == ["Worked together on salvage"]


@pytest.mark.parametrize(
    ("score", "label"),
    [
        (0.0, RelationshipLevel.HOSTILE),
        (1.0, RelationshipLevel.HOSTILE),
        (2.5, RelationshipLevel.TENSE),
        (5.0, RelationshipLevel.NEUTRAL),
        (6.0, RelationshipLevel.FRIENDLY),
        (8.5, RelationshipLevel.CLOSE),
        (9.5, RelationshipLevel.INTIMATE),
    ],
)
def test_labels_follow_score(score: float, label: RelationshipLevel) -> None:
    assert RelationshipLevel.from_score(score) is label


def test_morale_bonus_frame_sums_each_members_bonds() -> None:
    ledger = RelationshipLedger()
    ledger.introduce("bob", ["amy"])
    ledger.introduce("cyd", ["amy", "bob"])
    ledger.change("amy", "bob", 5, "Rescue")  # intimate: +5
    ledger.change("amy", "cyd", -4, "Stole rations")  # hostile: -3

    frame = ledger.morale_bonus_frame()
    bonuses = dict(zip(frame["crew_id"].to_list(), frame["bonus"].to_list()))

    assert bonuses == {"amy": 2, "bob": 5, "cyd": -3}
    assert ledger.morale_bonus("amy") == 2
    assert ledger.close_pairs() == [("amy", "bob", 10.0)]
    assert ledger.rival_pairs() == [("amy", "cyd", 1.0)]


def test_empty_ledger_frames_are_typed() -> None:
    ledger = RelationshipLedger()
    assert ledger.to_frame().columns == ["crew_a", "crew_b", "level", "label"]
    assert ledger.morale_bonus_frame().is_empty()


def test_remove_crew_drops_their_bonds() -> None:
    ledger = RelationshipLedger()
    ledger.introduce("bob", ["amy"])
    ledger.introduce("cyd", ["amy", "bob"])
    assert ledger.remove_crew("amy") == 2
    assert [(rel.crew_a, rel.crew_b) for rel in ledger] == [("bob", "cyd")]
