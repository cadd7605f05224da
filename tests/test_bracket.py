import pytest

from rallytourney import Tournament, TournamentPhase
from rallytourney.controllers.tournament.bracket import BracketBuilder, BracketGraph
from rallytourney.controllers.tournament.stage_generator import StageGenerator
from rallytourney.exceptions import (
    InvalidConfigurationException,
    TournamentStateException,
    UnboundSlotException,
)
from rallytourney.models.events import SlotBackfilled
from rallytourney.models.store import TournamentStore
from rallytourney.models.team import Team

NAMES = ["Aces", "Blockers", "Diggers", "Setters", "Spikers", "Servers"]


def _store(n):
    store = TournamentStore()
    store.add_teams(Team(id=i, name=NAMES[i - 1]) for i in range(1, n + 1))
    return store


def _build(n, first_round=2):
    store = _store(n)
    builder = BracketBuilder(StageGenerator(store.next_match_id))
    bracket = builder.build(store.roster(), first_round)
    store.add_matches(bracket.matches)
    return store, bracket


def _bracket_tournament(n):
    tournament = Tournament(tournament_format="bracket")
    tournament.initialize(NAMES[:n], n)
    return tournament


def _play(tournament, match_id, score_a, score_b):
    tournament.record_score(match_id, "A", score_a)
    tournament.record_score(match_id, "B", score_b)
    return tournament.finish_match(match_id)


def _play_group_lower_id_wins(tournament):
    for match in tournament.get_current_matches():
        a_id, b_id = match.team_ids
        if a_id < b_id:
            _play(tournament, match.id, 21, 10)
        else:
            _play(tournament, match.id, 10, 21)


# ========== BracketBuilder ==========


def test_three_seeds_play_final_only():
    store, bracket = _build(3)

    assert len(bracket.matches) == 1
    assert bracket.final.team_ids == (1, 2)
    assert bracket.final.stage_label == "final"
    assert bracket.eliminated_ids == [3]


def test_four_seeds_semis_and_tbd_final():
    store, bracket = _build(4)

    semi_1, semi_2, final = bracket.matches
    assert semi_1.team_ids == (1, 4)
    assert semi_2.team_ids == (2, 3)
    assert {semi_1.stage_label, semi_2.stage_label} == {"semi"}
    assert final.team_ids == (None, None)
    assert final.team_a.name == "TBD"
    assert final.round == 3
    assert [f.source_match_id for f in bracket.graph.feeders_of(final.id)] == [
        semi_1.id,
        semi_2.id,
    ]


def test_five_seeds_bottom_two_play_in():
    store, bracket = _build(5)

    qualifier, semi_1, semi_2, final = bracket.matches
    assert qualifier.stage_label == "qualifier"
    assert qualifier.team_ids == (4, 5)
    assert semi_1.team_ids == (1, None)
    assert semi_2.team_ids == (2, 3)
    assert [qualifier.round, semi_1.round, final.round] == [2, 3, 4]
    assert bracket.graph.feeds_from(qualifier.id)[0].target_match_id == semi_1.id


def test_six_seeds_cross_qualifiers():
    store, bracket = _build(6)

    q1, q2, semi_1, semi_2, final = bracket.matches
    assert q1.team_ids == (3, 6)
    assert q2.team_ids == (4, 5)
    assert semi_1.team_ids == (1, None)
    assert semi_2.team_ids == (2, None)
    assert bracket.graph.feeds_from(q2.id)[0].target_match_id == semi_1.id
    assert bracket.graph.feeds_from(q1.id)[0].target_match_id == semi_2.id


@pytest.mark.parametrize("count", [2, 7])
def test_unsupported_seed_counts(count):
    store = TournamentStore()
    teams = [Team(id=i, name=f"Team {i}") for i in range(1, count + 1)]
    builder = BracketBuilder(StageGenerator(store.next_match_id))

    with pytest.raises(InvalidConfigurationException):
        builder.build(teams, 2)


def test_backfill_binds_winner_once():
    store, bracket = _build(4)
    semi_1, semi_2, final = bracket.matches
    semi_2.score_a, semi_2.score_b = 15, 21
    semi_2.winner_id = 3
    semi_2.completed = True

    applied = bracket.graph.backfill(store, semi_2)

    assert [f.side for f in applied] == ["B"]
    assert final.team_b.team_id == 3
    assert final.team_b.name == "Diggers"
    assert not final.is_ready
    assert len(store.events.of_type(SlotBackfilled)) == 1
    # Already bound: nothing more to apply
    assert bracket.graph.backfill(store, semi_2) == []


def test_backfill_ignores_open_match():
    store, bracket = _build(4)

    assert bracket.graph.backfill(store, bracket.matches[0]) == []


def test_empty_graph_has_no_feeds():
    graph = BracketGraph()

    assert graph.feeds_from(1) == []
    assert graph.feeders_of(1) == []


# ========== Bracket format through the facade ==========


def test_bracket_format_opens_group_stage_at_setup():
    tournament = _bracket_tournament(4)

    assert tournament.phase is TournamentPhase.STAGE
    assert tournament.current_stage.stage_label == "group"
    assert len(tournament.get_current_matches()) == 6


def test_four_team_bracket_semis_in_any_order():
    tournament = _bracket_tournament(4)
    _play_group_lower_id_wins(tournament)

    transition = tournament.advance_stage()

    assert transition.phase is TournamentPhase.KNOCKOUT
    assert transition.eliminated_ids == ()
    semi_1, semi_2, final = (tournament.get_match(i) for i in transition.match_ids)

    # Second semi first; the final's A slot is still TBD
    _play(tournament, semi_2.id, 10, 21)
    assert final.team_b.team_id == 3
    with pytest.raises(UnboundSlotException):
        tournament.record_score(final.id, "A", 21)
    with pytest.raises(UnboundSlotException):
        tournament.finish_match(final.id)
    with pytest.raises(TournamentStateException):
        tournament.advance_stage()

    _play(tournament, semi_1.id, 21, 17)
    assert final.team_ids == (1, 3)
    assert [t.id for t in tournament.eliminated] == [2, 4]

    _play(tournament, final.id, 19, 21)

    assert tournament.phase is TournamentPhase.COMPLETE
    assert tournament.champion.id == 3
    assert tournament.runner_up.id == 1
    assert 1 not in [t.id for t in tournament.eliminated]


def test_bracket_counters_are_cumulative():
    tournament = _bracket_tournament(4)
    _play_group_lower_id_wins(tournament)
    tournament.advance_stage()
    semi_1 = tournament.get_current_matches()[0]

    _play(tournament, semi_1.id, 21, 12)

    team = tournament.get_team(1)
    assert team.matches_played == 4
    assert team.total_points == 4 * 26


def test_three_team_bracket_drops_third_seed():
    tournament = _bracket_tournament(3)
    _play_group_lower_id_wins(tournament)

    transition = tournament.advance_stage()

    assert transition.eliminated_ids == (3,)
    final = tournament.get_match(transition.match_ids[0])
    assert final.team_ids == (1, 2)
    _play(tournament, final.id, 21, 5)
    assert tournament.champion.id == 1


def test_five_team_bracket_runs_to_champion():
    tournament = _bracket_tournament(5)
    _play_group_lower_id_wins(tournament)
    qualifier_id, semi_1_id, semi_2_id, final_id = tournament.advance_stage().match_ids

    _play(tournament, qualifier_id, 14, 21)
    assert tournament.get_match(semi_1_id).team_ids == (1, 5)
    _play(tournament, semi_1_id, 21, 11)
    _play(tournament, semi_2_id, 21, 19)
    _play(tournament, final_id, 25, 23)

    assert tournament.champion.name == "Aces"
    assert tournament.runner_up.name == "Blockers"
    assert [t.id for t in tournament.eliminated] == [4, 5, 3]


def test_six_team_bracket_backfills_both_semis():
    tournament = _bracket_tournament(6)
    _play_group_lower_id_wins(tournament)
    q1_id, q2_id, semi_1_id, semi_2_id, final_id = (
        tournament.advance_stage().match_ids
    )

    _play(tournament, q1_id, 21, 8)  # 3 beats 6
    _play(tournament, q2_id, 9, 21)  # 5 beats 4

    assert tournament.get_match(semi_1_id).team_ids == (1, 5)
    assert tournament.get_match(semi_2_id).team_ids == (2, 3)
    assert tournament.get_match(final_id).team_ids == (None, None)
