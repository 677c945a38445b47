import pytest

from daofactory.services.governance import (
    ProposalStatus,
    TallySnapshot,
    approval_label,
    next_status,
    parse_status,
)


def snap(yes, no, members, threshold=51):
    return TallySnapshot(votes_for=yes, votes_against=no, member_count=members, approval_threshold=threshold)


@pytest.mark.parametrize("members,quorum", [(1, 1), (2, 1), (3, 2), (4, 2), (5, 3), (10, 5), (11, 6)])
def test_quorum_is_half_membership_rounded_up(members, quorum):
    assert snap(0, 0, members).quorum == quorum


def test_zero_votes_never_pass_even_with_zero_threshold():
    s = snap(0, 0, members=0, threshold=0)
    assert s.approval_pct == 0
    assert s.quorum_met  # 0 >= 0
    assert not s.threshold_met
    assert next_status(ProposalStatus.ACTIVE, s) is ProposalStatus.ACTIVE


def test_first_yes_of_four_members_misses_quorum():
    assert next_status(ProposalStatus.ACTIVE, snap(1, 0, 4)) is ProposalStatus.ACTIVE


def test_second_yes_of_four_members_passes():
    assert next_status(ProposalStatus.ACTIVE, snap(2, 0, 4)) is ProposalStatus.PASSED


def test_threshold_equality_passes():
    s = snap(1, 1, members=4, threshold=50)
    assert s.approval_pct == 50
    assert next_status(ProposalStatus.ACTIVE, s) is ProposalStatus.PASSED


def test_two_thirds_below_seventy_stays_active():
    s = snap(2, 1, members=4, threshold=70)
    assert s.quorum_met
    assert not s.threshold_met
    assert next_status(ProposalStatus.ACTIVE, s) is ProposalStatus.ACTIVE


def test_overwhelming_no_does_not_auto_reject():
    assert next_status(ProposalStatus.ACTIVE, snap(0, 4, 4)) is ProposalStatus.ACTIVE


@pytest.mark.parametrize("current", [ProposalStatus.PASSED, ProposalStatus.REJECTED])
def test_terminal_states_are_sticky(current):
    assert next_status(current, snap(4, 0, 4)) is current
    assert current.is_terminal


def test_parse_status_tolerates_reserved_and_unknown_labels():
    assert parse_status("active") is ProposalStatus.ACTIVE
    assert parse_status("rejected") is ProposalStatus.REJECTED
    assert parse_status("archived") is ProposalStatus.REJECTED


@pytest.mark.parametrize("pct,label", [(100.0, 100), (200 / 3, 67), (50.5, 51), (50.4, 50), (0.0, 0)])
def test_approval_label_rounds_half_up(pct, label):
    assert approval_label(pct) == label


@pytest.mark.parametrize("yes,no,members,threshold", [
    (29, 21, 50, 58),
    (57, 43, 100, 57),
    (58, 42, 100, 58),
])
def test_exact_percentage_ties_meet_threshold(yes, no, members, threshold):
    s = snap(yes, no, members, threshold)
    assert s.threshold_met
    assert next_status(ProposalStatus.ACTIVE, s) is ProposalStatus.PASSED


def test_one_vote_short_of_threshold_stays_active():
    assert next_status(ProposalStatus.ACTIVE, snap(28, 22, 50, 58)) is ProposalStatus.ACTIVE
