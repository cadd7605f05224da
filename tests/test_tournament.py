import threading

import pytest

from rallytourney import Tournament, TournamentPhase
from rallytourney.exceptions import (
    InvalidConfigurationException,
    MatchCompletedException,
    MatchNotFoundException,
    StageIncompleteException,
    TeamCountValidationException,
    TeamNameValidationException,
    TeamNotFoundException,
    ThresholdNotReachedException,
    TournamentStateException,
)

NAMES = ["Aces", "Blockers", "Diggers", "Setters", "Spikers", "Servers"]


def _tournament(n, policy="accumulator"):
    tournament = Tournament(scoring_policy=policy)
    tournament.initialize(NAMES[:n], n)
    return tournament


def _play(tournament, match_id, score_a, score_b):
    tournament.record_score(match_id, "A", score_a)
    tournament.record_score(match_id, "B", score_b)
    return tournament.finish_match(match_id)


def _play_stage_lower_id_wins(tournament):
    """Lower team id wins every match of the current stage 21-10."""
    for match in tournament.get_current_matches():
        a_id, b_id = match.team_ids
        if a_id < b_id:
            _play(tournament, match.id, 21, 10)
        else:
            _play(tournament, match.id, 10, 21)


# ========== Setup ==========


def test_initialize_creates_roster():
    tournament = Tournament()

    roster = tournament.initialize(NAMES[:4], 4)

    assert [t.id for t in roster] == [1, 2, 3, 4]
    assert [t.name for t in roster] == NAMES[:4]
    assert all(t.total_points == 0 and t.matches_played == 0 for t in roster)
    assert tournament.phase is TournamentPhase.AWAITING_CONFIG
    assert [o.id for o in tournament.list_group_config_options()] == [
        "two-equal",
        "single",
    ]


def test_initialize_ignores_entries_past_team_count_and_strips_names():
    tournament = Tournament()

    roster = tournament.initialize(["  Aces ", "Blockers", "Diggers", ""], 3)

    assert [t.name for t in roster] == ["Aces", "Blockers", "Diggers"]


@pytest.mark.parametrize(
    "names",
    [
        ["Aces", "", "Diggers"],
        ["Aces", "   ", "Diggers"],
        ["Aces", None, "Diggers"],
        ["Aces", "Blockers"],
    ],
)
def test_missing_names_rejected(names):
    tournament = Tournament()

    with pytest.raises(TeamNameValidationException, match="all 3 teams"):
        tournament.initialize(names, 3)

    assert tournament.phase is TournamentPhase.SETUP
    assert tournament.get_team_list() == []


def test_duplicate_names_rejected():
    tournament = Tournament()

    with pytest.raises(TeamNameValidationException, match="unique"):
        tournament.initialize(["Aces", "Blockers", " Aces"], 3)

    assert tournament.phase is TournamentPhase.SETUP


@pytest.mark.parametrize("team_count", [2, 7, 0])
def test_team_count_out_of_range(team_count):
    with pytest.raises(TeamCountValidationException):
        Tournament().initialize(NAMES + ["Liberos"], team_count)


def test_initialize_twice_rejected():
    tournament = _tournament(3)

    with pytest.raises(TournamentStateException):
        tournament.initialize(NAMES[:3], 3)


def test_unknown_policy_rejected():
    with pytest.raises(InvalidConfigurationException):
        Tournament(scoring_policy="rally-point")
    with pytest.raises(InvalidConfigurationException):
        Tournament(tournament_format="swiss")


# ========== Score entry ==========


def test_record_score_clamps_to_playable_range():
    tournament = _tournament(3)
    tournament.advance_stage("single")

    assert tournament.record_score(1, "A", 35).score_a == 30
    assert tournament.record_score(1, "B", -4).score_b == 0


def test_adjust_score_increments():
    tournament = _tournament(3)
    tournament.advance_stage("single")

    tournament.adjust_score(1, "A", 1)
    tournament.adjust_score(1, "A", 1)
    match = tournament.adjust_score(1, "A", -5)

    assert match.score_a == 0
    assert match.status == "pending"


def test_unknown_ids():
    tournament = _tournament(3)
    tournament.advance_stage("single")

    with pytest.raises(MatchNotFoundException):
        tournament.record_score(99, "A", 5)
    with pytest.raises(MatchNotFoundException):
        tournament.finish_match(99)
    with pytest.raises(TeamNotFoundException):
        tournament.get_team(42)


def test_finish_below_threshold_rejected_without_state_change():
    tournament = _tournament(3)
    tournament.advance_stage("single")
    tournament.record_score(1, "A", 18)
    tournament.record_score(1, "B", 15)
    events_before = len(tournament.events)

    with pytest.raises(ThresholdNotReachedException):
        tournament.finish_match(1)

    match = tournament.get_match(1)
    assert not match.completed
    assert match.winner_id is None
    assert all(t.total_points == 0 for t in tournament.get_team_list())
    assert all(t.matches_played == 0 for t in tournament.get_team_list())
    assert len(tournament.events) == events_before


def test_second_finish_is_a_no_op():
    tournament = _tournament(3)
    tournament.advance_stage("single")
    _play(tournament, 1, 21, 19)
    totals = [t.total_points for t in tournament.get_team_list()]

    match = tournament.finish_match(1)

    assert match.completed
    assert [t.total_points for t in tournament.get_team_list()] == totals
    assert tournament.get_team(1).matches_played == 1


def test_completed_match_rejects_score_edits():
    tournament = _tournament(3)
    tournament.advance_stage("single")
    _play(tournament, 1, 21, 19)

    with pytest.raises(MatchCompletedException):
        tournament.record_score(1, "B", 25)
    assert tournament.get_match(1).score_b == 19


def test_accumulator_deltas_through_facade():
    tournament = _tournament(3)
    tournament.advance_stage("single")

    match = _play(tournament, 1, 21, 19)

    assert match.winner_id == 1
    assert tournament.get_team(1).total_points == 26
    assert tournament.get_team(1).wins == 1
    assert tournament.get_team(2).total_points == 19
    assert tournament.get_team(2).losses == 1


def test_differential_totals_can_go_negative():
    tournament = _tournament(3, policy="differential")
    tournament.advance_stage("single")

    _play(tournament, 1, 21, 18)  # 1 v 2
    _play(tournament, 2, 21, 10)  # 1 v 3

    assert tournament.get_team(1).total_points == 14
    assert tournament.get_team(2).total_points == -3
    assert tournament.get_team(3).total_points == -11


def test_both_past_threshold_higher_score_wins():
    tournament = _tournament(3)
    tournament.advance_stage("single")

    match = _play(tournament, 1, 24, 26)

    assert match.winner_id == 2
    assert tournament.get_team(2).total_points == 26
    assert tournament.get_team(1).total_points == 24


# ========== Standings ==========


def test_standings_ties_keep_roster_order():
    tournament = _tournament(4)
    tournament.advance_stage("single")

    assert [t.id for t in tournament.get_standings()] == [1, 2, 3, 4]

    _play(tournament, 6, 10, 21)  # 3 v 4, team 4 wins

    assert [t.id for t in tournament.get_standings()] == [4, 3, 1, 2]


def test_standings_by_group():
    tournament = _tournament(4)
    tournament.advance_stage("two-equal")

    assert [t.id for t in tournament.get_standings("A")] == [1, 2]
    assert [t.id for t in tournament.get_standings("B")] == [3, 4]
    assert tournament.get_standings("C") == []


def test_standings_empty_during_setup():
    assert Tournament().get_standings() == []


def test_point_totals_recomputable_from_event_log():
    tournament = _tournament(5, policy="differential")
    tournament.advance_stage("single")
    scores = [(21, 3), (19, 21), (25, 23), (21, 20), (8, 21)]
    for match, (a, b) in zip(tournament.get_current_matches(), scores):
        _play(tournament, match.id, a, b)

    for team in tournament.get_team_list():
        assert sum(tournament.events.point_deltas(team.id)) == team.total_points
        assert tournament.recompute_total_points(team.id) == team.total_points


# ========== Advancement ==========


def test_advance_requires_config_when_awaiting():
    tournament = _tournament(4)

    with pytest.raises(TournamentStateException):
        tournament.advance_stage()


def test_invalid_config_leaves_state_unchanged():
    tournament = _tournament(5)

    with pytest.raises(InvalidConfigurationException):
        tournament.advance_stage("two-equal")

    assert tournament.phase is TournamentPhase.AWAITING_CONFIG
    assert tournament.stages == []
    assert tournament.get_matches() == []


def test_advance_before_stage_complete_rejected():
    tournament = _tournament(4)
    tournament.advance_stage("single")
    _play(tournament, 1, 21, 5)

    with pytest.raises(StageIncompleteException):
        tournament.advance_stage()

    assert tournament.phase is TournamentPhase.STAGE
    assert tournament.eliminated == []
    assert tournament.get_team(1).total_points == 26


def test_four_teams_two_groups_to_champion():
    tournament = _tournament(4)

    start = tournament.advance_stage("two-equal")
    assert start.phase is TournamentPhase.STAGE
    matches = tournament.get_current_matches()
    assert [(m.group, m.team_ids) for m in matches] == [("A", (1, 2)), ("B", (3, 4))]

    _play(tournament, matches[0].id, 21, 15)
    _play(tournament, matches[1].id, 18, 21)
    assert tournament.is_stage_complete()

    transition = tournament.advance_stage()

    assert transition.phase is TournamentPhase.FINAL
    assert transition.qualified_ids == (1, 4)
    assert set(transition.eliminated_ids) == {2, 3}
    final = tournament.get_match(transition.match_ids[0])
    assert final.stage_label == "final"
    assert final.team_ids == (1, 4)
    # Counters are per stage
    assert tournament.get_team(1).total_points == 0
    assert tournament.get_team(4).matches_played == 0
    assert tournament.get_matches(stage_label="round-1")[0].completed

    _play(tournament, final.id, 21, 19)

    assert tournament.phase is TournamentPhase.COMPLETE
    assert tournament.tournament_over
    assert tournament.champion.name == "Aces"
    assert tournament.runner_up.name == "Setters"
    assert tournament.get_team(1).total_points == 26
    assert tournament.get_team(4).total_points == 19

    # Terminal: nothing more is accepted
    with pytest.raises(TournamentStateException):
        tournament.advance_stage()
    with pytest.raises(MatchCompletedException):
        tournament.record_score(final.id, "A", 25)
    assert tournament.finish_match(final.id).winner_id == 1


def test_six_teams_single_groups_down_to_final():
    tournament = _tournament(6)
    tournament.advance_stage("single")
    assert len(tournament.get_current_matches()) == 15
    _play_stage_lower_id_wins(tournament)

    closed = tournament.advance_stage()

    assert closed.phase is TournamentPhase.AWAITING_CONFIG
    assert closed.qualified_ids == (1, 2, 3)
    assert closed.eliminated_ids == (4, 5, 6)
    assert [o.id for o in closed.options] == ["single", "uneven-split"]
    snapshot = tournament.stages[0].standings[None]
    assert [row["total_points"] for row in snapshot] == [130, 114, 98, 82, 66, 50]

    second = tournament.advance_stage("single")
    assert second.round == 2
    assert tournament.current_stage.stage_label == "round-2"
    assert len(tournament.get_current_matches()) == 3
    _play_stage_lower_id_wins(tournament)

    to_final = tournament.advance_stage()

    assert to_final.phase is TournamentPhase.FINAL
    assert to_final.qualified_ids == (1, 2)
    assert to_final.eliminated_ids == (3,)
    assert tournament.get_match(to_final.match_ids[0]).round == 3


def test_config_passed_when_closing_opens_next_stage():
    tournament = _tournament(6)
    tournament.advance_stage("single")
    _play_stage_lower_id_wins(tournament)

    transition = tournament.advance_stage("single")

    assert transition.phase is TournamentPhase.STAGE
    assert transition.round == 2
    assert len(transition.match_ids) == 3


def test_invalid_config_when_closing_is_atomic():
    tournament = _tournament(6)
    tournament.advance_stage("single")
    _play_stage_lower_id_wins(tournament)

    with pytest.raises(InvalidConfigurationException):
        tournament.advance_stage("two-equal")

    assert tournament.phase is TournamentPhase.STAGE
    assert not tournament.current_stage.closed
    assert tournament.eliminated == []
    assert tournament.get_team(1).total_points == 130


def test_five_teams_uneven_split_qualifiers():
    tournament = _tournament(5)
    tournament.advance_stage("uneven-split")
    assert tournament.current_stage.groups == {"A": [1, 2, 3], "B": [4, 5]}
    _play_stage_lower_id_wins(tournament)

    transition = tournament.advance_stage()

    # A sends two, B sends one; seeded A1, B1, A2
    assert transition.qualified_ids == (1, 4, 2)
    assert transition.eliminated_ids == (3, 5)
    assert tournament.list_group_config_options() == list(transition.options)
    assert [o.id for o in transition.options] == ["single", "uneven-split"]


def test_six_teams_two_groups_reach_convergence():
    tournament = _tournament(6)
    tournament.advance_stage("two-equal")
    _play_stage_lower_id_wins(tournament)

    closed = tournament.advance_stage()
    assert closed.qualified_ids == (1, 4, 2, 5)

    tournament.advance_stage("two-equal")
    assert tournament.current_stage.groups == {"A": [1, 4], "B": [2, 5]}
    _play_stage_lower_id_wins(tournament)

    to_final = tournament.advance_stage()
    assert to_final.phase is TournamentPhase.FINAL
    assert to_final.qualified_ids == (1, 2)


def test_eliminated_teams_stay_in_roster():
    tournament = _tournament(4)
    tournament.advance_stage("two-equal")
    _play_stage_lower_id_wins(tournament)
    tournament.advance_stage()

    assert len(tournament.get_team_list()) == 4
    assert [t.id for t in tournament.get_team_list(active_only=True)] == [1, 3]
    assert [t.id for t in tournament.eliminated] == [2, 4]
    assert [t.id for t in tournament.get_standings()] == [1, 3]


def test_three_teams_uneven_split_to_champion():
    tournament = _tournament(3)

    tournament.advance_stage("uneven-split")

    assert tournament.current_stage.groups == {"A": [1, 2], "B": [3]}
    matches = tournament.get_current_matches()
    assert [(m.group, m.team_ids) for m in matches] == [("A", (1, 2))]
    assert [t.id for t in tournament.get_standings("B")] == [3]

    _play(tournament, matches[0].id, 10, 21)
    transition = tournament.advance_stage()

    # Lone Group B team goes through without playing
    assert transition.phase is TournamentPhase.FINAL
    assert transition.qualified_ids == (2, 3)
    assert transition.eliminated_ids == (1,)
    final = tournament.get_match(transition.match_ids[0])
    assert final.team_ids == (2, 3)

    _play(tournament, final.id, 21, 17)

    assert tournament.phase is TournamentPhase.COMPLETE
    assert tournament.champion.name == "Blockers"
    assert tournament.runner_up.name == "Diggers"
    assert [t.id for t in tournament.eliminated] == [1]


def test_instances_are_independent():
    first = _tournament(3)
    second = _tournament(3)
    first.advance_stage("single")
    _play(first, 1, 21, 0)

    assert second.phase is TournamentPhase.AWAITING_CONFIG
    assert second.get_team(1).total_points == 0


def test_reset_returns_to_setup():
    tournament = _tournament(3)
    tournament.advance_stage("single")

    tournament.reset()

    assert tournament.phase is TournamentPhase.SETUP
    assert tournament.get_matches() == []
    tournament.initialize(["X", "Y", "Z"], 3)
    assert tournament.get_team(1).name == "X"


def test_to_dict_snapshot():
    tournament = _tournament(3)
    tournament.advance_stage("single")

    data = tournament.to_dict()

    assert data["phase"] == "stage"
    assert data["config"]["scoring_policy"] == "accumulator"
    assert len(data["matches"]) == 3
    assert data["events"][0]["kind"] == "teams_registered"


@pytest.mark.parametrize(
    "read",
    [
        lambda t: t.get_team(1),
        lambda t: t.get_matches(),
        lambda t: t.get_current_matches(),
        lambda t: t.list_group_config_options(),
        lambda t: t.is_stage_complete(),
        lambda t: t.recompute_total_points(1),
    ],
)
def test_reads_wait_for_the_tournament_lock(read):
    tournament = _tournament(3)
    tournament.advance_stage("single")
    results = []
    reader = threading.Thread(target=lambda: results.append(read(tournament)))

    with tournament._lock:
        reader.start()
        reader.join(timeout=0.2)
        assert reader.is_alive()
        assert results == []

    reader.join(timeout=5)
    assert not reader.is_alive()
    assert len(results) == 1
